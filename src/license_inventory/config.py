"""Configuration for an inventory run.

Settings can be given in code or loaded from a TOML file, either under an
``[inventory]`` table or at the top level:

    [inventory]
    threshold = 0.92
    shingle_size = 3
    max_workers = 8
    exclude = ["tentris*"]
    corpus_dir = "licenses/"
    thirdparty_metadata_key = "tentris.thirdparty-file-name"

    [inventory.comment_markers]
    fortran = ["!"]
"""

import fnmatch
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from license_inventory.errors import ConfigError
from license_inventory.matcher import DEFAULT_SHINGLE_SIZE, DEFAULT_THRESHOLD

_C_MARKERS = ("/*", "*/", "//", "*")

DEFAULT_COMMENT_MARKERS: dict[str, tuple[str, ...]] = {
    "c": _C_MARKERS,
    "cpp": _C_MARKERS,
    "shell": ("#",),
    "python": ("#",),
    "cmake": ("#",),
    "lua": ("--",),
    "sql": ("--",),
    "ini": (";", "#"),
}


def _default_workers() -> int:
    return max(1, os.cpu_count() or 1)


@dataclass
class InventoryConfig:
    """Settings for normalization, matching and scheduling.

    Attributes:
        threshold: Minimum match confidence, inclusive.
        shingle_size: Words per shingle used by the matcher.
        max_workers: Maximum dependencies processed concurrently.
        comment_markers: Source type to line-leading comment markers.
            Entries given by the user extend the defaults.
        exclude: fnmatch patterns of dependency names left out of the run.
        corpus_dir: Optional directory replacing the bundled corpus.
        thirdparty_metadata_key: Optional dotted key in cargo package
            metadata naming a scraped third-party report to load.
    """

    threshold: float = DEFAULT_THRESHOLD
    shingle_size: int = DEFAULT_SHINGLE_SIZE
    max_workers: int = field(default_factory=_default_workers)
    comment_markers: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_COMMENT_MARKERS)
    )
    exclude: tuple[str, ...] = ()
    corpus_dir: Optional[Path] = None
    thirdparty_metadata_key: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.threshold <= 1.0:
            raise ConfigError(f"threshold must be in (0, 1], got {self.threshold}")
        if self.shingle_size < 1:
            raise ConfigError(f"shingle_size must be at least 1, got {self.shingle_size}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")

    def is_excluded(self, name: str) -> bool:
        """Return True if the dependency name matches an exclude pattern."""
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.exclude)


def _expect(value: Any, kind: type | tuple[type, ...], key: str, path: Path) -> Any:
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ConfigError(f"Invalid value for '{key}' in {path}: {value!r}")
    return value


def _string_list(value: Any, key: str, path: Path) -> tuple[str, ...]:
    items = _expect(value, list, key, path)
    if not all(isinstance(item, str) for item in items):
        raise ConfigError(f"'{key}' in {path} must be a list of strings")
    return tuple(items)


def load_config(path: Path) -> InventoryConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        InventoryConfig with file values applied over the defaults.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If the file is not valid TOML or holds invalid values.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    section = data.get("inventory", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'inventory' in {path} must be a table")

    kwargs: dict[str, Any] = {}
    if "threshold" in section:
        kwargs["threshold"] = float(_expect(section["threshold"], (int, float), "threshold", path))
    if "shingle_size" in section:
        kwargs["shingle_size"] = _expect(section["shingle_size"], int, "shingle_size", path)
    if "max_workers" in section:
        kwargs["max_workers"] = _expect(section["max_workers"], int, "max_workers", path)
    if "exclude" in section:
        kwargs["exclude"] = _string_list(section["exclude"], "exclude", path)
    if "corpus_dir" in section:
        corpus_dir = Path(_expect(section["corpus_dir"], str, "corpus_dir", path))
        # Relative paths are resolved against the config file's directory.
        kwargs["corpus_dir"] = corpus_dir if corpus_dir.is_absolute() else path.parent / corpus_dir
    if "thirdparty_metadata_key" in section:
        kwargs["thirdparty_metadata_key"] = _expect(
            section["thirdparty_metadata_key"], str, "thirdparty_metadata_key", path
        )
    if "comment_markers" in section:
        markers = _expect(section["comment_markers"], dict, "comment_markers", path)
        merged = dict(DEFAULT_COMMENT_MARKERS)
        for source_type, values in markers.items():
            merged[source_type] = _string_list(values, f"comment_markers.{source_type}", path)
        kwargs["comment_markers"] = merged

    return InventoryConfig(**kwargs)
