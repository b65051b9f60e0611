"""Core data models for license_inventory.

This module defines the records flowing through the inventory: the
dependency records supplied by manifest and scraping collaborators, the
transient match candidates produced while classifying license text, and the
per-dependency packages returned as the final result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from license_inventory.identifiers import canonical_id, split_expression


@dataclass(frozen=True, order=True)
class LicenseIdentifier:
    """A canonical license identifier.

    The value is canonicalized at creation time ("mit" becomes "MIT",
    "Apache License 2.0" becomes "Apache-2.0"), so equality is an exact,
    case-sensitive comparison of canonical spellings.

    Attributes:
        spdx_id: SPDX short identifier, or an unrecognized token verbatim.
    """

    spdx_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "spdx_id", canonical_id(self.spdx_id))

    def __str__(self) -> str:
        return self.spdx_id

    @classmethod
    def from_expression(cls, expression: Optional[str]) -> frozenset["LicenseIdentifier"]:
        """Build identifiers for every license named in an SPDX expression.

        Args:
            expression: Expression such as "MIT OR Apache-2.0", or None.

        Returns:
            Frozen set of identifiers (empty for None or "UNKNOWN").
        """
        return frozenset(cls(spdx_id) for spdx_id in split_expression(expression))


@dataclass(frozen=True)
class LicenseText:
    """Raw content of a scraped license file.

    Attributes:
        text: File content exactly as captured.
        label: Optional path or file name for traceability.
        source_type: Optional scrape source type (e.g. "c", "shell")
            selecting which comment markers are stripped.
    """

    text: str
    label: Optional[str] = None
    source_type: Optional[str] = None


@dataclass(frozen=True)
class MatchCandidate:
    """A corpus license proposed for a normalized blob.

    Attributes:
        identifier: The matched corpus identifier.
        confidence: Similarity score in [0, 1].
        span: Optional (start, end) character offsets of the matched region
            within the normalized text.
    """

    identifier: LicenseIdentifier
    confidence: float
    span: Optional[tuple[int, int]] = None


class DependencySource(str, Enum):
    """Where a dependency record came from."""

    MANIFEST_DECLARED = "manifest"
    SCRAPED_RAW = "scraped"


@dataclass(frozen=True)
class Dependency:
    """A dependency as reported by a collaborator.

    A valid dependency carries at least one known identifier or raw text.
    That invariant is checked by the reconciler, not here, so malformed
    records can be counted rather than lost.

    Attributes:
        name: Dependency name.
        version: Version string (semantic or ecosystem-specific).
        source: Collaborator that produced the record.
        known_identifiers: Trusted identifiers from structured metadata.
        raw_texts: License texts still to be classified.
        url: Optional repository or homepage URL.
    """

    name: str
    version: str
    source: DependencySource
    known_identifiers: frozenset[LicenseIdentifier] = frozenset()
    raw_texts: tuple[LicenseText, ...] = ()
    url: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.version)


@dataclass(frozen=True)
class Package:
    """Final inventory record: one dependency with all of its licenses.

    Attributes:
        name: Dependency name.
        version: Dependency version.
        licenses: Distinct identifiers, sorted for reproducible output.
        unresolved: True if at least one license text could not be matched
            above the confidence threshold.
        unresolved_texts: Labels of the texts that could not be matched.
        url: Optional repository or homepage URL.
    """

    name: str
    version: str
    licenses: tuple[LicenseIdentifier, ...] = ()
    unresolved: bool = False
    unresolved_texts: tuple[str, ...] = ()
    url: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "licenses", tuple(sorted(set(self.licenses))))

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.version)

    @property
    def spdx_ids(self) -> tuple[str, ...]:
        """Return the license identifiers as plain strings."""
        return tuple(lic.spdx_id for lic in self.licenses)

    def merge(self, other: "Package") -> "Package":
        """Union two records describing the same logical dependency.

        Args:
            other: Package with the same (name, version).

        Returns:
            A new Package carrying the licenses of both records.

        Raises:
            ValueError: If the packages describe different dependencies.
        """
        if other.key != self.key:
            raise ValueError(
                f"Cannot merge {other.name} {other.version} into "
                f"{self.name} {self.version}"
            )
        return Package(
            name=self.name,
            version=self.version,
            licenses=self.licenses + other.licenses,
            unresolved=self.unresolved or other.unresolved,
            unresolved_texts=self.unresolved_texts + other.unresolved_texts,
            url=self.url or other.url,
        )


@dataclass(frozen=True)
class SkippedDependency:
    """A dependency omitted from the result, with the reason."""

    name: str
    version: str
    reason: str


@dataclass(frozen=True)
class InventoryResult:
    """Ordered packages of a run plus run-level summary statistics.

    Attributes:
        packages: Packages sorted by (name, version).
        skipped: Dependencies omitted because they were malformed or failed.
        excluded: (name, version) pairs dropped by configured exclude patterns.
    """

    packages: tuple[Package, ...] = ()
    skipped: tuple[SkippedDependency, ...] = ()
    excluded: tuple[tuple[str, str], ...] = ()

    @property
    def unresolved(self) -> tuple[Package, ...]:
        """Return packages holding at least one unclassified license text."""
        return tuple(pkg for pkg in self.packages if pkg.unresolved)

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
