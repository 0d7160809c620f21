# matching.py
# Tiered name search used by !hatches <egg>, !value and !search.

import re
from typing import Any, List, NamedTuple, Optional, Sequence

from records import resolve_name

MAX_MATCHES = 10

TIER_EXACT = 1
TIER_SUBSTRING = 2
TIER_COMPACT = 3
TIER_TOKENS = 4

_WS_RE = re.compile(r"\s+")
_STRIP_RE = re.compile(r"[^a-z0-9 ]")


class MatchResult(NamedTuple):
    records: List[Any]
    tier: Optional[int]  # None when nothing matched


def normalize_name(text: str) -> str:
    """'  Golden-Egg  (Deluxe)' -> 'goldenegg deluxe'"""
    s = _WS_RE.sub(" ", (text or "").lower())
    s = _STRIP_RE.sub("", s)
    return _WS_RE.sub(" ", s).strip()


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(ch in it for ch in needle)


def match_records(records: Sequence[Any], query: str) -> MatchResult:
    """
    Search records by name. Tiers are tried in order and the first one with
    any hit is returned on its own:
      1) exact  2) substring  3) substring ignoring spaces
      4) count of query words found in the name (best first)
    """
    q = normalize_name(query)
    if not q:
        return MatchResult([], None)

    names = [normalize_name(resolve_name(r)) for r in records]

    hits = [r for r, n in zip(records, names) if n == q]
    if hits:
        return MatchResult(hits[:MAX_MATCHES], TIER_EXACT)

    hits = [r for r, n in zip(records, names) if q in n]
    if hits:
        return MatchResult(hits[:MAX_MATCHES], TIER_SUBSTRING)

    q_compact = q.replace(" ", "")
    compact = [n.replace(" ", "") for n in names]
    hits = [r for r, n in zip(records, compact) if q_compact in n]
    if not hits:
        # letters in order with gaps, e.g. "gldnegg" -> "goldenegg"
        hits = [r for r, n in zip(records, compact) if _is_subsequence(q_compact, n)]
    if hits:
        return MatchResult(hits[:MAX_MATCHES], TIER_COMPACT)

    tokens = list(dict.fromkeys(q.split(" ")))
    scored = []
    for r, n in zip(records, names):
        score = sum(1 for t in tokens if t in n)
        if score:
            scored.append((score, r))
    # sorted() is stable, so equal scores keep input order
    scored = sorted(scored, key=lambda sr: -sr[0])
    if scored:
        return MatchResult([r for _, r in scored[:MAX_MATCHES]], TIER_TOKENS)

    return MatchResult([], None)
