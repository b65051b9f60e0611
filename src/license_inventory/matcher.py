"""License matcher scoring normalized text against the reference corpus.

Similarity is a Sorensen-Dice coefficient over word shingles (n-grams).
Shingles make the score robust to small edits: a changed word only
disturbs the few shingles that contain it.

Scraped files often concatenate several licenses (dual licensing, bundled
third-party notices). A blob longer than a corpus text is therefore scanned
with a window the size of that text and the best window is scored, so each
contained license is recognized on its own rather than diluted by the rest
of the file. A blob is also reported against every license it resembles
closely enough, so a text contained in a longer license (BSD-2-Clause in
BSD-3-Clause) names both.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from license_inventory.corpus import ReferenceCorpus
from license_inventory.errors import CorpusLoadError
from license_inventory.models import LicenseIdentifier, MatchCandidate
from license_inventory.normalizer import NormalizedText
from license_inventory.shingles import ShingleProfile, fingerprint

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.9
DEFAULT_SHINGLE_SIZE = 3


@dataclass(frozen=True)
class _Reference:
    identifier: LicenseIdentifier
    fingerprint: str
    profile: ShingleProfile


def _dice(blob: ShingleProfile, reference: ShingleProfile) -> tuple[float, Optional[tuple[int, int]]]:
    """Score a blob against one reference text.

    Returns:
        (score, span) where span covers the best-matching region of the blob.
    """
    ref_counts = reference.counts
    ref_len = len(reference)
    blob_len = len(blob)
    if not blob_len or not ref_len:
        return 0.0, None

    overlap = sum(min(n, blob.counts[s]) for s, n in ref_counts.items() if s in blob.counts)
    if not overlap:
        return 0.0, None

    if blob_len <= ref_len:
        return 2.0 * overlap / (blob_len + ref_len), blob.span_of(0, blob_len)

    # Slide a window of ref_len shingles over the blob, keeping the multiset
    # intersection size up to date as shingles enter and leave the window.
    shingles = blob.shingles
    window: Counter = Counter(shingles[:ref_len])
    inter = sum(min(n, ref_counts.get(s, 0)) for s, n in window.items())
    best, best_start = inter, 0
    for i in range(ref_len, blob_len):
        added = shingles[i]
        if window[added] < ref_counts.get(added, 0):
            inter += 1
        window[added] += 1

        removed = shingles[i - ref_len]
        window[removed] -= 1
        if window[removed] < ref_counts.get(removed, 0):
            inter -= 1

        if inter > best:
            best, best_start = inter, i - ref_len + 1
            if best == ref_len:
                break

    # Window and reference have the same length, so 2|A&B|/(|A|+|B|) reduces.
    return best / ref_len, blob.span_of(best_start, ref_len)


class LicenseMatcher:
    """Score normalized license text against every corpus entry.

    The matcher holds no mutable state after construction and can be shared
    by any number of worker threads.

    Attributes:
        corpus: The reference corpus.
        threshold: Minimum confidence for a candidate to be accepted.
        shingle_size: Number of words per shingle.
    """

    def __init__(
        self,
        corpus: ReferenceCorpus,
        threshold: float = DEFAULT_THRESHOLD,
        shingle_size: int = DEFAULT_SHINGLE_SIZE,
    ) -> None:
        """Initialize the matcher and precompute corpus shingle profiles.

        Args:
            corpus: Reference corpus of canonical license texts.
            threshold: Confidence threshold in (0, 1]; scores equal to the
                threshold are accepted.
            shingle_size: Words per shingle, at least 1.

        Raises:
            CorpusLoadError: If the corpus is empty.
            ValueError: If threshold or shingle_size is out of range.
        """
        if not corpus:
            raise CorpusLoadError("Reference corpus is empty; cannot match license texts")
        if not 0.0 < threshold <= 1.0:
            raise ValueError(f"threshold must be in (0, 1], got {threshold}")
        if shingle_size < 1:
            raise ValueError(f"shingle_size must be at least 1, got {shingle_size}")

        self.corpus = corpus
        self.threshold = threshold
        self.shingle_size = shingle_size
        self._references = tuple(
            _Reference(
                identifier=identifier,
                fingerprint=text.fingerprint,
                profile=ShingleProfile.of(text.normalized, shingle_size),
            )
            for identifier, entry in corpus.items()
            for text in entry.texts
        )

    def accepts(self, candidate: MatchCandidate) -> bool:
        """Return True if the candidate meets the confidence threshold."""
        return candidate.confidence >= self.threshold

    def _score(self, profile: ShingleProfile, exact: Optional[str]) -> list[MatchCandidate]:
        full_span = profile.span_of(0, len(profile)) if len(profile) else None
        best: dict[LicenseIdentifier, MatchCandidate] = {}
        for ref in self._references:
            if exact is not None and ref.fingerprint == exact:
                score, span = 1.0, full_span
            else:
                score, span = _dice(profile, ref.profile)
            if score <= 0.0:
                continue
            current = best.get(ref.identifier)
            if current is None or score > current.confidence:
                best[ref.identifier] = MatchCandidate(
                    identifier=ref.identifier,
                    confidence=score,
                    span=span,
                )

        return sorted(best.values(), key=lambda c: (-c.confidence, c.identifier))

    def evaluate(self, normalized: NormalizedText) -> list[MatchCandidate]:
        """Score the whole text against every corpus entry.

        Args:
            normalized: Output of the text normalizer.

        Returns:
            One candidate per identifier with a non-zero score, ordered by
            descending confidence then identifier. Not filtered by threshold.
        """
        profile = ShingleProfile.of(normalized.text, self.shingle_size)
        return self._score(profile, fingerprint(normalized.text))

    def best(self, normalized: NormalizedText) -> Optional[MatchCandidate]:
        """Return the highest-scoring candidate regardless of threshold."""
        candidates = self.evaluate(normalized)
        return candidates[0] if candidates else None

    def match(self, normalized: NormalizedText) -> list[MatchCandidate]:
        """Return every corpus license found in the text at or above the threshold.

        Every candidate scoring at or above the threshold against the text
        is returned, not just the best one. Matching then continues in
        rounds: the highest-scoring candidates (all of them when scores tie)
        have the text they cover masked, and what is left is scored again
        so that a blob concatenating several licenses yields one candidate
        per license.

        Args:
            normalized: Output of the text normalizer.

        Returns:
            Accepted candidates by descending confidence then identifier;
            empty when nothing in the text is recognizable.
        """
        profile = ShingleProfile.of(normalized.text, self.shingle_size)
        exact: Optional[str] = fingerprint(normalized.text)

        found: dict[LicenseIdentifier, MatchCandidate] = {}
        while len(profile):
            accepted = [c for c in self._score(profile, exact) if self.accepts(c)]
            if not accepted:
                break

            for candidate in accepted:
                current = found.get(candidate.identifier)
                if current is None or candidate.confidence > current.confidence:
                    found[candidate.identifier] = candidate

            top = accepted[0].confidence
            winners = [c for c in accepted if c.confidence == top]
            remaining = profile.without(c.span for c in winners if c.span)
            if len(remaining.tokens) == len(profile.tokens):
                break
            profile, exact = remaining, None

        return sorted(found.values(), key=lambda c: (-c.confidence, c.identifier))
