"""Base interface for output reporters.

Reporters generate formatted output (JSON, Markdown) from an inventory
result.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from license_inventory.models import InventoryResult


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(self, result: InventoryResult) -> str:
        """Render an inventory result to formatted output.

        Args:
            result: Inventory produced by the engine.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, result: InventoryResult, output_path: Path) -> None:
        """Render and write output to a file.

        Args:
            result: Inventory produced by the engine.
            output_path: Path to write the output file.
        """
        content = self.render(result)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "json" or "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension, like ".json" or ".md"."""
        ...
