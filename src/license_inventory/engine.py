"""Aggregation engine running reconciliation across all dependencies.

Each dependency only depends on itself and the shared read-only corpus, so
reconciliation fans out to worker threads and the results are gathered
before the single ordering step.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Optional

from license_inventory.config import InventoryConfig
from license_inventory.corpus import ReferenceCorpus
from license_inventory.errors import CorpusLoadError, MalformedDependencyError
from license_inventory.matcher import LicenseMatcher
from license_inventory.models import (
    Dependency,
    InventoryResult,
    Package,
    SkippedDependency,
)
from license_inventory.normalizer import TextNormalizer
from license_inventory.reconciler import DependencyReconciler

logger = logging.getLogger(__name__)


def aggregate(packages: Iterable[Package]) -> tuple[Package, ...]:
    """Order packages by (name, version), unifying records of the same key.

    Two records with the same (name, version) describe one logical
    dependency reported by both collaborators; their licenses are unioned.
    Different keys are never merged, even when their licenses are identical.

    Args:
        packages: Packages in any order.

    Returns:
        Packages sorted by (name, version), one per key.
    """
    by_key: dict[tuple[str, str], Package] = {}
    for package in packages:
        existing = by_key.get(package.key)
        by_key[package.key] = existing.merge(package) if existing else package
    return tuple(by_key[key] for key in sorted(by_key))


class InventoryEngine:
    """Build the license inventory for a set of dependencies.

    Attributes:
        corpus: Reference corpus shared read-only by all workers.
        config: Run configuration.
        reconciler: Reconciler used for every dependency.
    """

    def __init__(
        self,
        corpus: ReferenceCorpus,
        config: Optional[InventoryConfig] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            corpus: Loaded reference corpus.
            config: Optional configuration; defaults are used if omitted.

        Raises:
            CorpusLoadError: If the corpus is empty.
        """
        if not corpus:
            raise CorpusLoadError("Reference corpus is empty; refusing to run")

        self.corpus = corpus
        self.config = config or InventoryConfig()
        self.reconciler = DependencyReconciler(
            normalizer=TextNormalizer(self.config.comment_markers),
            matcher=LicenseMatcher(
                corpus,
                threshold=self.config.threshold,
                shingle_size=self.config.shingle_size,
            ),
        )

    async def build(self, dependencies: Iterable[Dependency]) -> InventoryResult:
        """Reconcile every dependency concurrently and aggregate the results.

        Per-dependency failures never abort the run: malformed dependencies
        and unexpected errors are logged and recorded as skipped.

        Args:
            dependencies: Dependencies from the manifest and scraping
                collaborators.

        Returns:
            InventoryResult with sorted packages and summary statistics.
        """
        included: list[Dependency] = []
        excluded: list[tuple[str, str]] = []
        for dependency in dependencies:
            if self.config.is_excluded(dependency.name):
                logger.debug("Excluding %s %s", dependency.name, dependency.version)
                excluded.append(dependency.key)
            else:
                included.append(dependency)

        logger.info(
            "Building license inventory for %d dependencies (%d workers)",
            len(included),
            self.config.max_workers,
        )

        semaphore = asyncio.Semaphore(self.config.max_workers)

        async def run_one(dependency: Dependency) -> Package:
            async with semaphore:
                return await asyncio.to_thread(self.reconciler.reconcile, dependency)

        results = await asyncio.gather(
            *(run_one(dep) for dep in included), return_exceptions=True
        )

        packages: list[Package] = []
        skipped: list[SkippedDependency] = []
        for dependency, result in zip(included, results):
            if isinstance(result, MalformedDependencyError):
                logger.warning("Skipping malformed dependency: %s", result)
                skipped.append(
                    SkippedDependency(dependency.name, dependency.version, str(result))
                )
            elif isinstance(result, BaseException):
                logger.error(
                    "Exception reconciling %s %s: %s",
                    dependency.name,
                    dependency.version,
                    result,
                )
                skipped.append(
                    SkippedDependency(dependency.name, dependency.version, str(result))
                )
            else:
                packages.append(result)

        inventory = InventoryResult(
            packages=aggregate(packages),
            skipped=tuple(sorted(skipped, key=lambda s: (s.name, s.version))),
            excluded=tuple(sorted(excluded)),
        )

        logger.info(
            "Inventory complete: %d packages, %d unresolved, %d skipped",
            len(inventory.packages),
            inventory.unresolved_count,
            inventory.skipped_count,
        )
        return inventory
