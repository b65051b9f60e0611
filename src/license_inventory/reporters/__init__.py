"""Output reporters for license inventories.

This module provides reporters for rendering an inventory result in
various formats.
"""

from license_inventory.reporters.base import BaseReporter
from license_inventory.reporters.json_report import JsonReporter
from license_inventory.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "JsonReporter", "MarkdownReporter", "get_reporter"]

_REPORTERS: dict[str, type[BaseReporter]] = {
    "json": JsonReporter,
    "markdown": MarkdownReporter,
}


def get_reporter(format_name: str) -> BaseReporter:
    """Return a reporter for the given format name.

    Raises:
        ValueError: If the format is not supported.
    """
    try:
        return _REPORTERS[format_name]()
    except KeyError:
        raise ValueError(
            f"Unsupported format '{format_name}'. "
            f"Supported formats: {', '.join(sorted(_REPORTERS))}"
        ) from None
