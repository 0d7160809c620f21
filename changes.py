# changes.py
# Duplicate suppression for the auto-posted hatches board.

import logging
from typing import Any, Sequence, Tuple

from records import resolve_name, resolve_number

log = logging.getLogger("tapsimbot.changes")

SEPARATOR = "|"
ABSENT = "-"


def _escape(name: str) -> str:
    # backslash-escape the delimiters inside names
    return name.replace("\\", "\\\\").replace(":", "\\:").replace(SEPARATOR, "\\" + SEPARATOR)


def fingerprint(records: Sequence[Any], field: str = "cost") -> str:
    """'name:value|name:value|...' for an already ranked top-N list."""
    parts = []
    for r in records:
        value = resolve_number(r, field)
        parts.append(f"{_escape(resolve_name(r))}:{ABSENT if value is None else value}")
    return SEPARATOR.join(parts)


class ChangeDetector:
    """
    Remembers the last board that was posted (in memory only, so the first
    board after a restart always counts as changed).
    """

    def __init__(self, field: str = "cost"):
        self.field = field
        self.last_fingerprint = ""

    def check(self, records: Sequence[Any]) -> Tuple[bool, str]:
        fp = fingerprint(records, self.field)
        return fp != self.last_fingerprint, fp

    def commit(self, fp: str) -> None:
        self.last_fingerprint = fp

    def evaluate(self, records: Sequence[Any]) -> bool:
        changed, fp = self.check(records)
        if changed:
            self.commit(fp)
            log.debug("board changed: %s", fp)
        return changed
