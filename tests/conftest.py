"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from license_inventory.corpus import ReferenceCorpus, load_bundled_corpus
from license_inventory.matcher import LicenseMatcher
from license_inventory.models import (
    Dependency,
    DependencySource,
    LicenseIdentifier,
    LicenseText,
)
from license_inventory.normalizer import TextNormalizer


@pytest.fixture(scope="session")
def corpus() -> ReferenceCorpus:
    """Return the bundled reference corpus."""
    return load_bundled_corpus()


@pytest.fixture(scope="session")
def license_texts(corpus: ReferenceCorpus) -> dict[str, str]:
    """Return the raw canonical text of every bundled license."""
    return {str(identifier): entry.texts[0].raw for identifier, entry in corpus.items()}


@pytest.fixture
def normalizer() -> TextNormalizer:
    """Return a normalizer with C and shell comment markers."""
    return TextNormalizer({"c": ["/*", "*/", "//", "*"], "shell": ["#"]})


@pytest.fixture
def matcher(corpus: ReferenceCorpus) -> LicenseMatcher:
    """Return a matcher over the bundled corpus with default settings."""
    return LicenseMatcher(corpus)


@pytest.fixture
def make_dependency() -> Callable[..., Dependency]:
    """Return a factory building Dependency records."""

    def _make(
        name: str = "zlib",
        version: str = "1.3.0",
        known: tuple[str, ...] = (),
        texts: tuple[str, ...] = (),
        source: DependencySource = DependencySource.SCRAPED_RAW,
    ) -> Dependency:
        return Dependency(
            name=name,
            version=version,
            source=source,
            known_identifiers=frozenset(LicenseIdentifier(k) for k in known),
            raw_texts=tuple(
                LicenseText(text=text, label=f"LICENSE-{i}") for i, text in enumerate(texts)
            ),
        )

    return _make
