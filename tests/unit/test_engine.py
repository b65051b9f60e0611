"""Tests for the aggregation engine."""

import asyncio
import logging
from collections.abc import Callable

import pytest

from license_inventory.config import InventoryConfig
from license_inventory.corpus import ReferenceCorpus
from license_inventory.engine import InventoryEngine, aggregate
from license_inventory.errors import CorpusLoadError
from license_inventory.models import (
    Dependency,
    DependencySource,
    LicenseIdentifier,
    Package,
)


@pytest.fixture
def dependencies(
    make_dependency: Callable[..., Dependency], license_texts: dict[str, str]
) -> list[Dependency]:
    """A mixed dependency graph of declared and scraped entries."""
    return [
        make_dependency(
            name="serde",
            version="1.0.200",
            known=("MIT", "Apache-2.0"),
            source=DependencySource.MANIFEST_DECLARED,
        ),
        make_dependency(name="zlib", version="1.3", texts=(license_texts["Zlib"],)),
        make_dependency(
            name="boost",
            version="1.84",
            texts=(license_texts["BSL-1.0"], "Custom vendor notice, do not copy."),
        ),
        make_dependency(
            name="abseil",
            version="2024.1",
            texts=(license_texts["Apache-2.0"] + "\n\n" + license_texts["MIT"],),
        ),
        make_dependency(name="ghost", version="0.1"),
    ]


class TestAggregate:
    """Test suite for aggregate."""

    def test_sorted_by_name_then_version(self) -> None:
        packages = [Package("b", "1"), Package("a", "2"), Package("a", "10")]

        assert [p.key for p in aggregate(packages)] == [("a", "10"), ("a", "2"), ("b", "1")]

    def test_same_key_merged(self) -> None:
        packages = [
            Package("zlib", "1.3", (LicenseIdentifier("Zlib"),)),
            Package("zlib", "1.3", (LicenseIdentifier("MIT"),)),
        ]

        result = aggregate(packages)

        assert len(result) == 1
        assert result[0].spdx_ids == ("MIT", "Zlib")

    def test_identical_licenses_not_collapsed(self) -> None:
        """Test that distinct packages with the same licenses stay distinct."""
        mit = (LicenseIdentifier("MIT"),)
        packages = [Package("a", "1", mit), Package("b", "1", mit), Package("a", "2", mit)]

        assert len(aggregate(packages)) == 3


class TestInventoryEngine:
    """Test suite for InventoryEngine."""

    def test_empty_corpus_rejected(self) -> None:
        with pytest.raises(CorpusLoadError):
            InventoryEngine(ReferenceCorpus.empty())

    @pytest.mark.asyncio
    async def test_build(self, corpus: ReferenceCorpus, dependencies: list[Dependency]) -> None:
        engine = InventoryEngine(corpus, InventoryConfig(max_workers=4))

        result = await engine.build(dependencies)

        by_name = {p.name: p for p in result.packages}
        assert [p.name for p in result.packages] == ["abseil", "boost", "serde", "zlib"]
        assert by_name["serde"].spdx_ids == ("Apache-2.0", "MIT")
        assert by_name["zlib"].spdx_ids == ("Zlib",)
        assert by_name["abseil"].spdx_ids == ("Apache-2.0", "MIT")
        assert by_name["boost"].spdx_ids == ("BSL-1.0",)
        assert by_name["boost"].unresolved is True

    @pytest.mark.asyncio
    async def test_malformed_dependency_skipped(
        self,
        corpus: ReferenceCorpus,
        dependencies: list[Dependency],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that one malformed dependency is skipped and the run continues."""
        engine = InventoryEngine(corpus)

        with caplog.at_level(logging.WARNING):
            result = await engine.build(dependencies)

        assert result.skipped_count == 1
        assert result.skipped[0].name == "ghost"
        assert "ghost" not in {p.name for p in result.packages}
        assert len(result.packages) == len(dependencies) - 1
        assert "Skipping malformed dependency" in caplog.text

    @pytest.mark.asyncio
    async def test_summary_counts(
        self, corpus: ReferenceCorpus, dependencies: list[Dependency]
    ) -> None:
        result = await InventoryEngine(corpus).build(dependencies)

        assert result.unresolved_count == 1
        assert [p.name for p in result.unresolved] == ["boost"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("workers", [1, 2, 16])
    async def test_deterministic_across_worker_counts(
        self, corpus: ReferenceCorpus, dependencies: list[Dependency], workers: int
    ) -> None:
        """Test that output does not depend on concurrency or input order."""
        sequential = await InventoryEngine(corpus, InventoryConfig(max_workers=1)).build(
            dependencies
        )
        parallel = await InventoryEngine(corpus, InventoryConfig(max_workers=workers)).build(
            list(reversed(dependencies))
        )

        assert parallel == sequential

    @pytest.mark.asyncio
    async def test_same_dependency_from_both_sources(
        self,
        corpus: ReferenceCorpus,
        make_dependency: Callable[..., Dependency],
        license_texts: dict[str, str],
    ) -> None:
        declared = make_dependency(
            name="ring", version="0.17", known=("ISC",), source=DependencySource.MANIFEST_DECLARED
        )
        scraped = make_dependency(name="ring", version="0.17", texts=(license_texts["MIT"],))

        result = await InventoryEngine(corpus).build([declared, scraped])

        assert len(result.packages) == 1
        assert result.packages[0].spdx_ids == ("ISC", "MIT")

    @pytest.mark.asyncio
    async def test_excluded_dependencies(
        self, corpus: ReferenceCorpus, dependencies: list[Dependency]
    ) -> None:
        config = InventoryConfig(exclude=("boo*", "ghost"))

        result = await InventoryEngine(corpus, config).build(dependencies)

        assert [p.name for p in result.packages] == ["abseil", "serde", "zlib"]
        assert result.excluded == (("boost", "1.84"), ("ghost", "0.1"))
        assert result.skipped_count == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_skipped(
        self, corpus: ReferenceCorpus, dependencies: list[Dependency], mocker
    ) -> None:
        """Test that an unexpected failure in one dependency does not abort the run."""
        engine = InventoryEngine(corpus)
        original = engine.reconciler.reconcile

        def flaky(dependency: Dependency) -> Package:
            if dependency.name == "zlib":
                raise RuntimeError("boom")
            return original(dependency)

        mocker.patch.object(engine.reconciler, "reconcile", side_effect=flaky)

        result = await engine.build(dependencies)

        assert {s.name for s in result.skipped} == {"ghost", "zlib"}
        assert any(s.reason == "boom" for s in result.skipped)

    @pytest.mark.asyncio
    async def test_cancelled_dependency_skipped(
        self, corpus: ReferenceCorpus, dependencies: list[Dependency], mocker
    ) -> None:
        """Test that a cancelled reconciliation is skipped, not reported as a package."""
        real_gather = asyncio.gather

        async def gather_with_cancel(*aws, return_exceptions=False):
            results = await real_gather(*aws, return_exceptions=return_exceptions)
            results[0] = asyncio.CancelledError()
            return results

        mocker.patch("license_inventory.engine.asyncio.gather", new=gather_with_cancel)

        result = await InventoryEngine(corpus).build(dependencies)

        assert {s.name for s in result.skipped} == {"ghost", "serde"}
        assert all(isinstance(p, Package) for p in result.packages)
        assert "serde" not in {p.name for p in result.packages}

    @pytest.mark.asyncio
    async def test_empty_dependency_list(self, corpus: ReferenceCorpus) -> None:
        result = await InventoryEngine(corpus).build([])

        assert result.packages == ()
        assert result.skipped == ()

    @pytest.mark.asyncio
    async def test_threshold_from_config(
        self,
        corpus: ReferenceCorpus,
        make_dependency: Callable[..., Dependency],
        license_texts: dict[str, str],
    ) -> None:
        edited = license_texts["MIT"].replace("hereby granted", "granted")
        dep = make_dependency(name="x", version="1", texts=(edited,))

        strict = await InventoryEngine(corpus, InventoryConfig(threshold=1.0)).build([dep])
        lenient = await InventoryEngine(corpus).build([dep])

        assert strict.packages[0].unresolved is True
        assert lenient.packages[0].spdx_ids == ("MIT",)
