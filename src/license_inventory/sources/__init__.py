"""Dependency sources for the collaborators' report formats.

This module provides readers turning manifest and scraping reports into
Dependency records.
"""

from pathlib import Path
from typing import Optional

from license_inventory.models import Dependency
from license_inventory.sources.base import BaseSource
from license_inventory.sources.cargo import CargoMetadataSource
from license_inventory.sources.thirdparty import ThirdPartySource, infer_source_type

__all__ = [
    "BaseSource",
    "CargoMetadataSource",
    "ThirdPartySource",
    "infer_source_type",
    "load_dependencies",
]


def load_dependencies(
    declared: list[Path],
    scraped: list[Path],
    thirdparty_key: Optional[str] = None,
) -> list[Dependency]:
    """Read every declared and scraped report, in the order given.

    Args:
        declared: Paths to ``cargo metadata`` JSON files.
        scraped: Paths to scraping tool reports.
        thirdparty_key: Optional dotted key in cargo package metadata naming
            further scraped reports to load.

    Returns:
        All dependencies, declared ones first.

    Raises:
        FileNotFoundError: If a report does not exist.
        ValueError: If a report is invalid.
    """
    sources: list[BaseSource] = [
        CargoMetadataSource(path, thirdparty_key) for path in declared
    ]
    sources.extend(ThirdPartySource(path) for path in scraped)

    dependencies: list[Dependency] = []
    for source in sources:
        dependencies.extend(source.load())
    return dependencies
