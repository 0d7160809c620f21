# queries.py
# What each bot command computes from a fetched payload, plus the periodic
# "auto post hatches" cycle. No Discord types in here.

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, NamedTuple, Optional, Sequence

from changes import ChangeDetector
from matching import TIER_EXACT, match_records
from records import extract_records, resolve_name, resolve_number, resolve_text

log = logging.getLogger("tapsimbot.queries")

TOP_N = 10


class Entry(NamedTuple):
    rank: int
    name: str
    value: Any          # resolved number, or None
    record: Any


def to_entries(records: Sequence[Any], field: str) -> List[Entry]:
    return [
        Entry(i, resolve_name(r), resolve_number(r, field), r)
        for i, r in enumerate(records, 1)
    ]


def rank_records(records: Sequence[Any], field: str, limit: int = TOP_N) -> List[Any]:
    """Highest resolved `field` first; records without it go last, in input order."""
    present, absent = [], []
    for r in records:
        (absent if resolve_number(r, field) is None else present).append(r)
    present.sort(key=lambda r: resolve_number(r, field), reverse=True)
    return (present + absent)[:limit]

# -----------------------------------------------------------------------------
# Per-command queries
# -----------------------------------------------------------------------------

def hatches(payload: Any, query: str = "") -> List[Entry]:
    """Matcher results for a query, else the same top N the auto-post shows."""
    eggs = extract_records(payload)
    if query.strip():
        return to_entries(match_records(eggs, query).records, "cost")
    return to_entries(rank_records(eggs, "cost"), "cost")


@dataclass
class ValueLookup:
    best: Optional[Entry]
    alternatives: List[Entry]
    exact: bool

    @property
    def found(self) -> bool:
        return self.best is not None


def value_lookup(payload: Any, query: str) -> ValueLookup:
    result = match_records(extract_records(payload), query)
    entries = to_entries(result.records, "tokenValue")
    if not entries:
        return ValueLookup(None, [], False)
    exact = result.tier == TIER_EXACT
    return ValueLookup(entries[0], entries[1:], exact)


def search(payload: Any, query: str) -> List[Entry]:
    return to_entries(match_records(extract_records(payload), query).records, "tokenValue")


def top_values(payload: Any) -> List[Entry]:
    return to_entries(rank_records(extract_records(payload), "tokenValue"), "tokenValue")


def enchants(payload: Any) -> List[Entry]:
    return to_entries(extract_records(payload)[:TOP_N], "tokenValue")


def snipes(payload: Any, limit: int = 5) -> List[Entry]:
    return to_entries(extract_records(payload)[:limit], "cost")


class TradeAd(NamedTuple):
    offering: Optional[str]
    wanting: Optional[str]


def ads(payload: Any, limit: int = 3) -> List[TradeAd]:
    return [
        TradeAd(resolve_text(r, "offering"), resolve_text(r, "wanting"))
        for r in extract_records(payload)[:limit]
    ]

# -----------------------------------------------------------------------------
# Periodic hatches board
# -----------------------------------------------------------------------------

class CycleResult(NamedTuple):
    changed: bool
    entries: List[Entry]


class HatchesPoster:
    """
    One cycle = fetch eggs, rank by price, post only if the top N changed.
    A cycle that is still running when the next one fires makes that one a
    no-op. Failures are logged and leave the detector alone.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Any]],
        notify: Callable[[List[Entry]], Awaitable[None]],
        detector: Optional[ChangeDetector] = None,
        limit: int = TOP_N,
    ):
        self.fetch = fetch
        self.notify = notify
        self.detector = detector or ChangeDetector("cost")
        self.limit = limit
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> Optional[CycleResult]:
        if self._lock.locked():
            log.info("hatches cycle still running, skipping this tick")
            return None
        async with self._lock:
            try:
                return await self._cycle()
            except Exception:
                log.exception("hatches cycle failed")
                return None

    async def _cycle(self) -> CycleResult:
        payload = await self.fetch()
        top = rank_records(extract_records(payload), self.detector.field, self.limit)
        changed, fp = self.detector.check(top)
        entries = to_entries(top, self.detector.field)
        if not changed:
            log.debug("hatches unchanged, not posting")
            return CycleResult(False, entries)

        await self.notify(entries)
        self.detector.commit(fp)
        log.info("posted hatches board (%d eggs)", len(entries))
        return CycleResult(True, entries)
