"""Base interface for dependency sources.

Sources read the reports of the collaborators surrounding the engine (a
manifest graph walker, a license scraping tool) and turn them into
Dependency records.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from license_inventory.models import Dependency


class BaseSource(ABC):
    """Abstract base class for dependency sources.

    Attributes:
        source_path: Path to the report being read.
    """

    def __init__(self, source_path: Path) -> None:
        """Initialize the source.

        Args:
            source_path: Path to the collaborator's report file.
        """
        self.source_path = source_path

    @abstractmethod
    def load(self) -> list[Dependency]:
        """Read the report and build dependency records.

        Returns:
            Dependencies in report order.

        Raises:
            FileNotFoundError: If the report does not exist.
            ValueError: If the report format is invalid.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this source type."""
        ...

    def _read_json(self) -> Any:
        """Read the report as JSON.

        Raises:
            FileNotFoundError: If the report does not exist.
            ValueError: If the report is not valid JSON.
        """
        if not self.source_path.exists():
            raise FileNotFoundError(f"{self.source_name} file not found: {self.source_path}")

        try:
            with open(self.source_path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self.source_path}: {e}") from e

    def _require(self, entry: dict, field: str) -> Any:
        if not isinstance(entry, dict):
            raise ValueError(f"Expected an object for each package in {self.source_path}")
        if field not in entry or entry[field] is None:
            raise ValueError(
                f"Package missing required field '{field}' in {self.source_path}"
            )
        return entry[field]
