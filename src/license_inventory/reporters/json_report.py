"""JSON reporter emitting the inventory as pretty-printed JSON."""

import json
from typing import Any

from license_inventory.models import InventoryResult, Package
from license_inventory.reporters.base import BaseReporter


def package_to_dict(package: Package) -> dict[str, Any]:
    return {
        "name": package.name,
        "version": package.version,
        "url": package.url,
        "licenses": list(package.spdx_ids),
        "unresolved": package.unresolved,
        "unresolved_texts": list(package.unresolved_texts),
    }


class JsonReporter(BaseReporter):
    """Reporter producing a JSON document with packages and run summary."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def render(self, result: InventoryResult) -> str:
        document = {
            "packages": [package_to_dict(pkg) for pkg in result.packages],
            "summary": {
                "packages": len(result.packages),
                "unresolved": [
                    {"name": pkg.name, "version": pkg.version}
                    for pkg in result.unresolved
                ],
                "unresolved_count": result.unresolved_count,
                "skipped": [
                    {"name": s.name, "version": s.version, "reason": s.reason}
                    for s in result.skipped
                ],
                "skipped_count": result.skipped_count,
                "excluded": [
                    {"name": name, "version": version} for name, version in result.excluded
                ],
            },
        }
        return json.dumps(document, indent=self.indent) + "\n"

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def default_extension(self) -> str:
        return ".json"
