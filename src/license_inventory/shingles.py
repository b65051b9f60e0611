"""Word shingling and text fingerprints used by the matcher."""

import hashlib
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

_TOKEN = re.compile(r"\w+")

Token = tuple[str, int, int]


def fingerprint(normalized: str) -> str:
    """Return a SHA-256 fingerprint of already-normalized text."""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ShingleProfile:
    """Word n-grams of a normalized text, with character offsets.

    Attributes:
        size: Words per shingle.
        tokens: (word, start, end) for every word, in text order.
        shingles: Shingles in text order, each a space-joined n-gram.
        counts: Multiset of the shingles.
        spans: (start, end) character offsets of each shingle.
    """

    size: int
    tokens: tuple[Token, ...]
    shingles: tuple[str, ...]
    counts: Counter
    spans: tuple[tuple[int, int], ...]

    @classmethod
    def of(cls, text: str, size: int) -> "ShingleProfile":
        """Build the shingle profile of a text."""
        return cls.from_tokens(
            [(m.group(), m.start(), m.end()) for m in _TOKEN.finditer(text)], size
        )

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token], size: int) -> "ShingleProfile":
        """Build a profile from tokens.

        Fewer than ``size`` tokens produce a single shingle made of all of them.
        """
        tokens = tuple(tokens)
        if not tokens:
            return cls(size=size, tokens=(), shingles=(), counts=Counter(), spans=())

        width = min(size, len(tokens))
        shingles = []
        spans = []
        for i in range(len(tokens) - width + 1):
            window = tokens[i : i + width]
            shingles.append(" ".join(word for word, _, _ in window))
            spans.append((window[0][1], window[-1][2]))

        return cls(
            size=size,
            tokens=tokens,
            shingles=tuple(shingles),
            counts=Counter(shingles),
            spans=tuple(spans),
        )

    def __len__(self) -> int:
        return len(self.shingles)

    def span_of(self, start: int, count: int) -> tuple[int, int]:
        """Return the character span covered by ``count`` shingles from ``start``."""
        last = min(start + count, len(self.spans)) - 1
        return (self.spans[start][0], self.spans[last][1])

    def without(self, spans: Iterable[tuple[int, int]]) -> "ShingleProfile":
        """Return a profile with every token inside the given spans removed.

        Character offsets of the remaining tokens are unchanged.
        """
        spans = list(spans)
        kept = [
            token
            for token in self.tokens
            if not any(start <= token[1] and token[2] <= end for start, end in spans)
        ]
        return ShingleProfile.from_tokens(kept, self.size)
