"""Source for the license scraping tool's third-party report.

The scraping tool writes a JSON list of packages, each with the raw content
of its license files:

    [
      {
        "package_name": "zlib",
        "package_version": "1.3",
        "package_url": "https://zlib.net",
        "license_spdx": null,
        "license_files": [{"name": "LICENSE", "spdx": null, "text": "..."}]
      }
    ]

Files already tagged with an SPDX identifier, and the package-level
``license_spdx`` expression, become known identifiers. Untagged files are
raw texts to be classified.
"""

from pathlib import PurePath
from typing import Optional

from license_inventory.models import (
    Dependency,
    DependencySource,
    LicenseIdentifier,
    LicenseText,
)
from license_inventory.sources.base import BaseSource

# File extension to comment-marker source type.
SOURCE_TYPES = {
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hh": "cpp",
    ".hpp": "cpp",
    ".sh": "shell",
    ".py": "python",
    ".cmake": "cmake",
    ".lua": "lua",
    ".sql": "sql",
    ".ini": "ini",
}


def infer_source_type(file_name: Optional[str]) -> Optional[str]:
    """Guess the comment-marker source type from a file name.

    Returns:
        Source type such as "c", or None for plain license files.
    """
    if not file_name:
        return None
    pure = PurePath(file_name)
    if pure.name == "CMakeLists.txt":
        return "cmake"
    return SOURCE_TYPES.get(pure.suffix.lower())


class ThirdPartySource(BaseSource):
    """Source for scraped third-party license reports."""

    @property
    def source_name(self) -> str:
        return "third-party report"

    def load(self) -> list[Dependency]:
        data = self._read_json()
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of packages in {self.source_path}")

        dependencies: list[Dependency] = []
        for pkg in data:
            name = self._require(pkg, "package_name")
            version = self._require(pkg, "package_version")

            known = set(LicenseIdentifier.from_expression(pkg.get("license_spdx")))
            raw_texts: list[LicenseText] = []
            for license_file in pkg.get("license_files") or []:
                if not isinstance(license_file, dict):
                    raise ValueError(
                        f"Invalid license file entry for '{name}' in {self.source_path}"
                    )
                # A NOASSERTION or UNKNOWN tag yields nothing; classify the text instead.
                tagged = LicenseIdentifier.from_expression(license_file.get("spdx"))
                if tagged:
                    known.update(tagged)
                    continue
                file_name = license_file.get("name")
                raw_texts.append(
                    LicenseText(
                        text=license_file.get("text") or "",
                        label=file_name,
                        source_type=infer_source_type(file_name),
                    )
                )

            dependencies.append(
                Dependency(
                    name=name,
                    version=version,
                    source=DependencySource.SCRAPED_RAW,
                    known_identifiers=frozenset(known),
                    raw_texts=tuple(raw_texts),
                    url=pkg.get("package_url"),
                )
            )

        return dependencies
