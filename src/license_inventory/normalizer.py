"""Text normalization for license comparison.

Scraped license blobs arrive with formatting noise: comment markers from
headers embedded in source files, copyright lines naming a particular
holder, and arbitrary wrapping. The normalizer removes that noise so that
two renditions of the same license compare equal.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from license_inventory.errors import EmptyInputError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

# "Copyright (c) 2020 Jane", "Copyright <year> <holder>", "(c) 2019", "©"
# A bare "Copyright" line counts too. "copyright notice, this list..." does not.
_COPYRIGHT_LINE = re.compile(
    r"^(?:copyright\b\s*:?\s*(?:\(c\)|©)?|\(c\)|©)\s*(?:$|\d{4}|[<\[{(©])",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class NormalizedText:
    """Result of normalizing a license blob.

    Attributes:
        text: Lower-cased, whitespace-collapsed text used for matching.
        original: The same text with its original casing, for span reporting.
    """

    text: str
    original: str

    def excerpt(self, span: tuple[int, int]) -> str:
        """Return the original-case text covered by a match span."""
        start, end = span
        return self.original[start:end]


def _marker_pattern(markers: Sequence[str]) -> Optional[re.Pattern[str]]:
    if not markers:
        return None
    # Longest first so "/*" wins over "*" and "//" over "/".
    ordered = sorted({m for m in markers if m}, key=len, reverse=True)
    if not ordered:
        return None
    alternatives = "|".join(re.escape(m) for m in ordered)
    return re.compile(rf"^(?:\s*(?:{alternatives}))+")


class TextNormalizer:
    """Normalize raw license text into a comparable form.

    Attributes:
        comment_markers: Mapping of scrape source type to the line-leading
            comment markers stripped for that type.
    """

    def __init__(self, comment_markers: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        """Initialize the normalizer.

        Args:
            comment_markers: Optional mapping such as {"shell": ["#"]}.
                Source types missing from the mapping get no stripping.
        """
        self.comment_markers = {
            source_type: tuple(markers)
            for source_type, markers in (comment_markers or {}).items()
        }
        self._patterns = {
            source_type: _marker_pattern(markers)
            for source_type, markers in self.comment_markers.items()
        }

    def normalize(
        self,
        raw: str,
        source_type: Optional[str] = None,
        label: Optional[str] = None,
    ) -> NormalizedText:
        """Normalize a raw license blob.

        Args:
            raw: License text as scraped.
            source_type: Optional source type selecting comment markers.
            label: Optional label used in the error message.

        Returns:
            NormalizedText with matching and display forms.

        Raises:
            EmptyInputError: If nothing remains after normalization.
        """
        pattern = self._patterns.get(source_type) if source_type else None

        kept: list[str] = []
        for line in (raw or "").splitlines():
            if pattern is not None:
                line = pattern.sub("", line, count=1)
            line = line.strip()
            if not line or _COPYRIGHT_LINE.match(line):
                continue
            kept.append(line)

        original = _WHITESPACE.sub(" ", " ".join(kept)).strip()
        if not original:
            raise EmptyInputError(label)

        return NormalizedText(text=original.lower(), original=original)
