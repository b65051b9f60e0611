"""Source for manifest-declared dependencies from ``cargo metadata``.

Reads the JSON written by ``cargo metadata --format-version 1`` and uses
each package's declared SPDX ``license`` expression as its known
identifiers. Packages that only point at a ``license_file`` contribute that
file's content as raw text to be classified.

Crates wrapping vendored C/C++ code can name their scraped third-party
report in package metadata:

    [package.metadata.tentris]
    thirdparty-file-name = "thirdparty.json"

With ``thirdparty_key="tentris.thirdparty-file-name"`` the named report is
resolved next to the crate's ``Cargo.toml`` and its packages are loaded too.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from license_inventory.models import (
    Dependency,
    DependencySource,
    LicenseIdentifier,
    LicenseText,
)
from license_inventory.sources.base import BaseSource
from license_inventory.sources.thirdparty import ThirdPartySource

logger = logging.getLogger(__name__)

# Lower-cased file name prefixes counted as license files in a crate directory.
LICENSE_FILE_PREFIXES = ("license", "licence", "copying", "unlicense")


def _lookup(metadata: Any, dotted_key: str) -> Optional[str]:
    node = metadata
    for part in dotted_key.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node if isinstance(node, str) else None


def count_license_files(crate_dir: Path) -> int:
    """Return the number of license files at the top of a crate directory."""
    return sum(
        1
        for path in crate_dir.iterdir()
        if path.is_file() and path.name.lower().startswith(LICENSE_FILE_PREFIXES)
    )


class CargoMetadataSource(BaseSource):
    """Source for ``cargo metadata`` JSON output.

    Attributes:
        thirdparty_key: Optional dotted key under each package's ``metadata``
            naming a scraped third-party report to load alongside.
    """

    def __init__(self, source_path: Path, thirdparty_key: Optional[str] = None) -> None:
        super().__init__(source_path)
        self.thirdparty_key = thirdparty_key

    @property
    def source_name(self) -> str:
        return "cargo metadata"

    def load(self) -> list[Dependency]:
        data = self._read_json()
        if not isinstance(data, dict) or not isinstance(data.get("packages"), list):
            raise ValueError(f"Missing 'packages' list in {self.source_path}")

        dependencies: list[Dependency] = []
        referenced: list[Dependency] = []
        for pkg in data["packages"]:
            name = self._require(pkg, "name")
            version = self._require(pkg, "version")

            known = LicenseIdentifier.from_expression(pkg.get("license"))
            raw_texts: tuple[LicenseText, ...] = ()
            if not known and pkg.get("license_file"):
                text = self._read_license_file(pkg)
                if text is not None:
                    raw_texts = (text,)

            if not known and not raw_texts:
                logger.warning("Package '%s %s' declares no license", name, version)
            elif known:
                self._check_license_files(pkg, name, version, len(known))

            dependencies.append(
                Dependency(
                    name=name,
                    version=version,
                    source=DependencySource.MANIFEST_DECLARED,
                    known_identifiers=known,
                    raw_texts=raw_texts,
                    url=pkg.get("repository") or pkg.get("homepage"),
                )
            )

            if self.thirdparty_key:
                report = _lookup(pkg.get("metadata"), self.thirdparty_key)
                if report:
                    referenced.extend(self._load_thirdparty(pkg, report))

        return dependencies + referenced

    def _crate_dir(self, pkg: dict) -> Path:
        manifest_path = pkg.get("manifest_path")
        return Path(manifest_path).parent if manifest_path else self.source_path.parent

    def _check_license_files(self, pkg: dict, name: str, version: str, n_spdx: int) -> None:
        if not pkg.get("manifest_path"):
            return
        crate_dir = self._crate_dir(pkg)
        if not crate_dir.is_dir():
            return

        found = count_license_files(crate_dir)
        if found != n_spdx:
            logger.warning(
                "Mismatch between license SPDX and number of license files found in "
                "crate '%s %s'. SPDX specifies %d but found %d",
                name,
                version,
                n_spdx,
                found,
            )

    def _load_thirdparty(self, pkg: dict, report: str) -> list[Dependency]:
        report_path = Path(report)
        if not report_path.is_absolute():
            report_path = self._crate_dir(pkg) / report_path

        logger.debug("Loading third-party report %s referenced by '%s'", report_path, pkg["name"])
        return ThirdPartySource(report_path).load()

    def _read_license_file(self, pkg: dict) -> Optional[LicenseText]:
        license_path = Path(pkg["license_file"])
        if not license_path.is_absolute():
            license_path = self._crate_dir(pkg) / license_path

        try:
            text = license_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Unable to read license file %s: %s", license_path, e)
            return None

        return LicenseText(text=text, label=license_path.name)
