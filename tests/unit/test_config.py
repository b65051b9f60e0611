"""Tests for configuration loading."""

from pathlib import Path

import pytest

from license_inventory.config import DEFAULT_COMMENT_MARKERS, InventoryConfig, load_config
from license_inventory.errors import ConfigError


class TestInventoryConfig:
    """Test suite for InventoryConfig."""

    def test_defaults(self) -> None:
        config = InventoryConfig()

        assert config.threshold == 0.9
        assert config.shingle_size == 3
        assert config.max_workers >= 1
        assert config.comment_markers["c"] == ("/*", "*/", "//", "*")
        assert config.exclude == ()
        assert config.corpus_dir is None
        assert config.thirdparty_metadata_key is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"threshold": 0.0},
            {"threshold": 1.5},
            {"shingle_size": 0},
            {"max_workers": 0},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ConfigError):
            InventoryConfig(**kwargs)

    def test_is_excluded(self) -> None:
        config = InventoryConfig(exclude=("tentris*", "internal-tool"))

        assert config.is_excluded("tentris-core")
        assert config.is_excluded("internal-tool")
        assert not config.is_excluded("serde")

    def test_default_markers_not_shared(self) -> None:
        config = InventoryConfig()
        config.comment_markers["fortran"] = ("!",)

        assert "fortran" not in InventoryConfig().comment_markers


class TestLoadConfig:
    """Test suite for load_config."""

    def test_inventory_table(self, tmp_path: Path) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text(
            "[inventory]\n"
            "threshold = 0.95\n"
            "shingle_size = 4\n"
            "max_workers = 2\n"
            'exclude = ["tentris*"]\n'
            "\n"
            "[inventory.comment_markers]\n"
            'fortran = ["!"]\n'
        )

        config = load_config(path)

        assert config.threshold == 0.95
        assert config.shingle_size == 4
        assert config.max_workers == 2
        assert config.exclude == ("tentris*",)
        assert config.comment_markers["fortran"] == ("!",)
        assert config.comment_markers["shell"] == DEFAULT_COMMENT_MARKERS["shell"]

    def test_top_level_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text("threshold = 1\n")

        assert load_config(path).threshold == 1.0

    def test_thirdparty_metadata_key(self, tmp_path: Path) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text('[inventory]\nthirdparty_metadata_key = "tentris.thirdparty-file-name"\n')

        assert load_config(path).thirdparty_metadata_key == "tentris.thirdparty-file-name"

    def test_relative_corpus_dir(self, tmp_path: Path) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text('[inventory]\ncorpus_dir = "licenses"\n')

        assert load_config(path).corpus_dir == tmp_path / "licenses"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text("[inventory\nthreshold = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)

    @pytest.mark.parametrize(
        "body",
        [
            'threshold = "high"',
            "max_workers = true",
            "shingle_size = 2.5",
            'exclude = "tentris*"',
            "exclude = [1, 2]",
            "threshold = 2.0",
            "thirdparty_metadata_key = 3",
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str) -> None:
        path = tmp_path / "inventory.toml"
        path.write_text(f"[inventory]\n{body}\n")

        with pytest.raises(ConfigError):
            load_config(path)
