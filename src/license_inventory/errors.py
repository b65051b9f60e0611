"""Exception hierarchy for license_inventory.

Per-dependency failures (empty license text, malformed dependency records)
are recovered by the engine and surface as status on the result. Only a
missing or empty reference corpus is fatal to a run.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from license_inventory.models import Dependency


class InventoryError(Exception):
    """Base class for all license_inventory errors."""


class EmptyInputError(InventoryError):
    """Raised when a license blob is empty after normalization."""

    def __init__(self, label: Optional[str] = None) -> None:
        self.label = label
        where = f" ({label})" if label else ""
        super().__init__(f"License text{where} is empty after normalization")


class MalformedDependencyError(InventoryError):
    """Raised when a dependency has neither known identifiers nor raw texts."""

    def __init__(self, dependency: "Dependency") -> None:
        self.dependency = dependency
        super().__init__(
            f"Dependency {dependency.name} {dependency.version} has no known "
            "license identifiers and no license texts"
        )


class CorpusLoadError(InventoryError):
    """Raised when the reference corpus is missing, unreadable or empty."""


class InvalidIdentifierError(InventoryError, ValueError):
    """Raised when a license identifier is empty or blank."""


class ConfigError(InventoryError, ValueError):
    """Raised when a configuration file contains invalid values."""
