"""Query normalization and content-addressed filenames.

A query such as ``"Milk, eggs ,flour"`` is turned into a canonical key
(``"eggs,flour,milk"``) so that differently ordered or cased queries share
one persisted record. The key is then hashed into a short, stable filename.

DESIGN DECISIONS:
- Tokens are split on commas, trimmed, lowercased and sorted
- Empty tokens are dropped; duplicate tokens are kept (order is
  canonicalized, multiplicity is not)
- MD5 is used as a stable content address, not for security; Python's
  built-in ``hash()`` is salted per process and would break filenames
  across restarts
"""

import hashlib
from typing import Iterable, List

QUERY_DELIMITER = ","
MAX_HASH_CHARS = 12


def split_terms(raw_query: str) -> List[str]:
    """Split a raw query into trimmed, lowercased, non-empty terms.

    Args:
        raw_query: Free-form comma separated query

    Returns:
        Terms in their original order
    """
    if not raw_query:
        return []
    terms = []
    for token in raw_query.split(QUERY_DELIMITER):
        term = token.strip().lower()
        if term:
            terms.append(term)
    return terms


def split_raw_terms(raw_query: str) -> List[str]:
    """Split a comma separated list into trimmed, non-empty terms, keeping case.

    Used by entry points to turn user input into search terms; the case is
    kept so memory keys and stored queries match what the user typed.
    """
    if not raw_query:
        return []
    return [token.strip() for token in raw_query.split(QUERY_DELIMITER) if token.strip()]


def normalize_query(raw_query: str) -> str:
    """Derive the canonical, order-independent key for a query.

    Pure and total: the empty string normalizes to the empty string, and
    normalizing an already-normalized key returns it unchanged.

    Args:
        raw_query: Free-form comma separated query

    Returns:
        Sorted terms joined by the delimiter

    Example:
        >>> normalize_query(" Milk,eggs ")
        'eggs,milk'
    """
    return QUERY_DELIMITER.join(sorted(split_terms(raw_query)))


def join_terms(terms: Iterable[str]) -> str:
    """Join individual search terms into a raw query string."""
    return QUERY_DELIMITER.join(terms)


def content_hash(normalized_key: str) -> str:
    """Return the short hex digest used in content-addressed filenames.

    Args:
        normalized_key: Output of :func:`normalize_query`

    Returns:
        First ``MAX_HASH_CHARS`` hex characters of the MD5 digest
    """
    digest = hashlib.md5(normalized_key.encode("utf-8")).hexdigest()
    return digest[:MAX_HASH_CHARS]


def hashed_filename(prefix: str, normalized_key: str) -> str:
    """Build ``<prefix>_<hash12>.json`` for a normalized key."""
    return f"{prefix}_{content_hash(normalized_key)}.json"
