"""License Inventory - consolidated third-party license inventory.

This package identifies licenses in scraped license texts, merges them with
licenses declared in package manifests, and produces one record per
dependency carrying all of its licenses.
"""

__version__ = "0.1.0"

from license_inventory.corpus import ReferenceCorpus, load_bundled_corpus, load_corpus_dir
from license_inventory.engine import InventoryEngine
from license_inventory.errors import (
    CorpusLoadError,
    EmptyInputError,
    InventoryError,
    MalformedDependencyError,
)
from license_inventory.models import (
    Dependency,
    DependencySource,
    InventoryResult,
    LicenseIdentifier,
    LicenseText,
    MatchCandidate,
    Package,
    SkippedDependency,
)

__all__ = [
    "__version__",
    "CorpusLoadError",
    "Dependency",
    "DependencySource",
    "EmptyInputError",
    "InventoryEngine",
    "InventoryError",
    "InventoryResult",
    "LicenseIdentifier",
    "LicenseText",
    "MalformedDependencyError",
    "MatchCandidate",
    "Package",
    "ReferenceCorpus",
    "SkippedDependency",
    "load_bundled_corpus",
    "load_corpus_dir",
]
