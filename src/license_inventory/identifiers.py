"""Canonicalization of license identifiers to SPDX short identifiers.

Manifest metadata and scraped files spell the same license in many ways
("Apache License 2.0", "apache-2.0", "MIT/Apache-2.0"). Everything is mapped
to one vocabulary at ingestion time so that a package's license set never
holds two spellings of the same license.
"""

import logging
import re
from functools import lru_cache
from typing import Optional

from license_expression import (
    ExpressionError,
    LicenseSymbol,
    get_spdx_licensing,
)

from license_inventory.errors import InvalidIdentifierError

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

# Common non-SPDX spellings seen in manifests and scraped metadata.
# Keys are lower-cased for case-insensitive lookup.
LICENSE_ALIASES = {
    "apache 2": "Apache-2.0",
    "apache 2.0": "Apache-2.0",
    "apache license 2.0": "Apache-2.0",
    "apache license, version 2.0": "Apache-2.0",
    "apache license version 2.0": "Apache-2.0",
    "apache software license": "Apache-2.0",
    "apache-2": "Apache-2.0",
    "asl 2.0": "Apache-2.0",
    "mit license": "MIT",
    "the mit license": "MIT",
    "expat": "MIT",
    "bsd license": "BSD-3-Clause",
    "new bsd license": "BSD-3-Clause",
    "bsd 3-clause license": "BSD-3-Clause",
    "bsd-3": "BSD-3-Clause",
    "simplified bsd license": "BSD-2-Clause",
    "bsd 2-clause license": "BSD-2-Clause",
    "bsd-2": "BSD-2-Clause",
    "isc license": "ISC",
    "zlib license": "Zlib",
    "boost software license 1.0": "BSL-1.0",
    "boost": "BSL-1.0",
    "the unlicense": "Unlicense",
    "mozilla public license 2.0": "MPL-2.0",
    "python software foundation license": "PSF-2.0",
}

# Markers meaning "no license information" rather than a license.
NO_ASSERTION = frozenset({"unknown", "noassertion", "none"})

_WHITESPACE = re.compile(r"\s+")
_LEGACY_OR = re.compile(r"\s*/\s*")


def _collapse(token: str) -> str:
    return _WHITESPACE.sub(" ", token).strip()


@lru_cache(maxsize=1024)
def canonical_id(token: str) -> str:
    """Return the canonical spelling of a single license identifier.

    Args:
        token: Raw identifier such as "mit", "Apache License 2.0" or
            "LicenseRef-proprietary".

    Returns:
        The SPDX short identifier when the token is a known license or
        alias, otherwise the whitespace-collapsed token unchanged.

    Raises:
        InvalidIdentifierError: If the token is empty or blank.
    """
    collapsed = _collapse(token or "")
    if not collapsed:
        raise InvalidIdentifierError("License identifier must not be empty")

    alias = LICENSE_ALIASES.get(collapsed.lower())
    if alias:
        return alias

    try:
        parsed = SPDX.parse(collapsed)
    except ExpressionError:
        logger.debug("Keeping unparseable license identifier verbatim: %s", collapsed)
        return collapsed

    if isinstance(parsed, LicenseSymbol) and parsed.key:
        return parsed.key

    return collapsed


def split_expression(expression: Optional[str]) -> list[str]:
    """Split an SPDX license expression into canonical identifiers.

    "MIT OR Apache-2.0" yields both licenses; the legacy Cargo form
    "MIT/Apache-2.0" is treated as OR. Exceptions stay attached to their
    license ("GPL-2.0-only WITH Classpath-exception-2.0" is one entry).

    Args:
        expression: SPDX expression, or None.

    Returns:
        Canonical identifiers in order of first appearance, without
        duplicates. Empty for None, blank or no-assertion markers.
    """
    if expression is None:
        return []

    collapsed = _collapse(expression)
    if not collapsed or collapsed.lower() in NO_ASSERTION:
        return []

    alias = LICENSE_ALIASES.get(collapsed.lower())
    if alias:
        return [alias]

    try:
        parsed = SPDX.parse(_LEGACY_OR.sub(" OR ", collapsed))
    except ExpressionError:
        logger.debug("Could not parse license expression: %s", collapsed)
        return [canonical_id(collapsed)]

    if parsed is None:
        return []

    identifiers: list[str] = []
    for symbol in SPDX.license_symbols(parsed, unique=True, decompose=False):
        identifier = canonical_id(str(symbol))
        if identifier not in identifiers:
            identifiers.append(identifier)
    return identifiers
