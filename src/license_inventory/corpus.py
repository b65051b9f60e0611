"""Reference corpus of canonical license texts.

The corpus is loaded once per run and shared read-only by every worker.
It maps each license identifier to one or more canonical texts, each kept
both raw and normalized together with a fingerprint of the normalized form.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

from license_inventory.errors import CorpusLoadError, EmptyInputError
from license_inventory.models import LicenseIdentifier
from license_inventory.normalizer import TextNormalizer
from license_inventory.shingles import fingerprint

logger = logging.getLogger(__name__)

# "MIT__variant.txt" adds a further text to the "MIT" entry.
VARIANT_SEPARATOR = "__"


@dataclass(frozen=True)
class CanonicalText:
    """One canonical rendition of a license.

    Attributes:
        raw: Text as stored in the corpus.
        normalized: Normalized text used for matching.
        fingerprint: SHA-256 of the normalized text.
        label: Origin of the text (file name or "<memory>").
    """

    raw: str
    normalized: str
    fingerprint: str
    label: str = "<memory>"


@dataclass(frozen=True)
class CorpusEntry:
    """All canonical texts of one license identifier."""

    identifier: LicenseIdentifier
    texts: tuple[CanonicalText, ...]


class ReferenceCorpus(Mapping[LicenseIdentifier, CorpusEntry]):
    """Immutable mapping of license identifier to corpus entry.

    Iteration order is sorted by identifier so every consumer sees the
    entries in the same order.
    """

    def __init__(self, entries: Mapping[LicenseIdentifier, CorpusEntry]) -> None:
        ordered = {key: entries[key] for key in sorted(entries)}
        self._entries = MappingProxyType(ordered)

    def __getitem__(self, key: Union[LicenseIdentifier, str]) -> CorpusEntry:
        if isinstance(key, str):
            key = LicenseIdentifier(key)
        return self._entries[key]

    def __iter__(self) -> Iterator[LicenseIdentifier]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        ids = ", ".join(str(key) for key in self._entries)
        return f"ReferenceCorpus([{ids}])"

    @classmethod
    def empty(cls) -> "ReferenceCorpus":
        return cls({})

    @classmethod
    def from_texts(
        cls,
        texts: Mapping[str, Union[str, list[str], tuple[str, ...]]],
        normalizer: Optional[TextNormalizer] = None,
    ) -> "ReferenceCorpus":
        """Build a corpus from in-memory texts.

        Args:
            texts: Mapping of identifier to one text or a list of texts.
            normalizer: Normalizer applied to every text. Corpus texts are
                plain license files, so no comment markers are stripped.

        Returns:
            The corpus.

        Raises:
            CorpusLoadError: If a text is empty after normalization.
        """
        normalizer = normalizer or TextNormalizer()
        builder: dict[LicenseIdentifier, list[CanonicalText]] = {}
        for spdx_id, value in texts.items():
            values = [value] if isinstance(value, str) else list(value)
            for raw in values:
                _add_text(builder, normalizer, spdx_id, raw, "<memory>")
        return cls(_freeze(builder))


def _add_text(
    builder: dict[LicenseIdentifier, list[CanonicalText]],
    normalizer: TextNormalizer,
    spdx_id: str,
    raw: str,
    label: str,
) -> None:
    try:
        normalized = normalizer.normalize(raw, label=label).text
    except EmptyInputError as e:
        raise CorpusLoadError(f"Corpus text for {spdx_id} is empty: {label}") from e

    identifier = LicenseIdentifier(spdx_id)
    builder.setdefault(identifier, []).append(
        CanonicalText(
            raw=raw,
            normalized=normalized,
            fingerprint=fingerprint(normalized),
            label=label,
        )
    )


def _freeze(
    builder: dict[LicenseIdentifier, list[CanonicalText]],
) -> dict[LicenseIdentifier, CorpusEntry]:
    return {
        identifier: CorpusEntry(identifier=identifier, texts=tuple(texts))
        for identifier, texts in builder.items()
    }


def load_corpus_dir(
    directory: Path,
    normalizer: Optional[TextNormalizer] = None,
) -> ReferenceCorpus:
    """Load a corpus from a directory of ``<identifier>.txt`` files.

    Args:
        directory: Directory holding the canonical texts.
        normalizer: Optional normalizer (defaults to no comment stripping).

    Returns:
        The loaded corpus.

    Raises:
        CorpusLoadError: If the directory is missing, a file cannot be read,
            or no texts are found.
    """
    if not directory.is_dir():
        raise CorpusLoadError(f"Corpus directory not found: {directory}")

    normalizer = normalizer or TextNormalizer()
    builder: dict[LicenseIdentifier, list[CanonicalText]] = {}
    for path in sorted(directory.glob("*.txt")):
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CorpusLoadError(f"Unable to read corpus file {path}: {e}") from e
        spdx_id = path.stem.split(VARIANT_SEPARATOR, 1)[0]
        _add_text(builder, normalizer, spdx_id, raw, path.name)

    if not builder:
        raise CorpusLoadError(f"No license texts (*.txt) found in {directory}")

    logger.debug("Loaded %d corpus entries from %s", len(builder), directory)
    return ReferenceCorpus(_freeze(builder))


def load_bundled_corpus(normalizer: Optional[TextNormalizer] = None) -> ReferenceCorpus:
    """Load the canonical texts shipped with license_inventory.

    Returns:
        The bundled corpus.

    Raises:
        CorpusLoadError: If the bundled data is missing or empty.
    """
    normalizer = normalizer or TextNormalizer()
    builder: dict[LicenseIdentifier, list[CanonicalText]] = {}
    data = files("license_inventory.corpus_data")
    for resource in sorted(data.iterdir(), key=lambda r: r.name):
        if not resource.name.endswith(".txt"):
            continue
        spdx_id = resource.name[: -len(".txt")].split(VARIANT_SEPARATOR, 1)[0]
        _add_text(builder, normalizer, spdx_id, resource.read_text(encoding="utf-8"), resource.name)

    if not builder:
        raise CorpusLoadError("Bundled license corpus is empty")

    return ReferenceCorpus(_freeze(builder))
