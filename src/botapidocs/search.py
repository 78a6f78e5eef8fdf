"""Identifier search over a documentation snapshot.

Only names are matched (case-insensitive substring), never description
bodies.  Hits are all matching methods followed by all matching types,
capped at :data:`MAX_RESULTS`.  Pure and non-blocking.
"""

from __future__ import annotations

from botapidocs.models import Entity, Snapshot

MAX_RESULTS = 50  # Telegram accepts at most 50 results per inline answer
PREFIX = "botapi"


_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def _ascii_lower(s: str) -> str:
    return s.translate(_LOWER)


def normalize(raw: str) -> str:
    """Return the effective query for a raw inline-query string.

    Leading ``botapi`` tokens (ASCII case-insensitive) are dropped and the
    rest is rejoined with single spaces; otherwise the trimmed string is
    returned as-is.  An empty result means "empty query".
    """
    query = raw.strip()
    tokens = query.split()
    if not tokens or _ascii_lower(tokens[0]) != PREFIX:
        return query
    while tokens and _ascii_lower(tokens[0]) == PREFIX:
        tokens = tokens[1:]
    return " ".join(tokens)


def search(query: str, snapshot: Snapshot, limit: int = MAX_RESULTS) -> list[Entity]:
    """Return methods then types whose name contains ``query`` (case-insensitive)."""
    needle = _ascii_lower(query)
    hits: list[Entity] = []
    for section in (snapshot.methods, snapshot.types):
        for name, entity in section.items():
            if needle in _ascii_lower(name):
                hits.append(entity)
                if len(hits) >= limit:
                    return hits
    return hits
