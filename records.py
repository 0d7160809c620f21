# records.py
# Turn whatever the Tap Sim API returns into a list of records, and pull
# named fields (name / value / price ...) out of records whose keys drift.

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

Number = Union[int, float]

# -----------------------------------------------------------------------------
# Schema normalizer
# -----------------------------------------------------------------------------

# Checked in this order before falling back to "first list-valued property".
CONTAINER_KEYS: Tuple[str, ...] = (
    "rows", "data", "items", "results", "list", "payload",
    "eggs", "ads", "snipes", "enchants",
)

def extract_records(doc: Any) -> List[Any]:
    """
    Return the record list inside a decoded JSON document.
    A top-level array is returned as-is; an object is probed for a known
    container key, then for its first array-valued property. Anything else
    gives [].
    """
    if isinstance(doc, list):
        return doc
    if not isinstance(doc, dict):
        return []

    for key in CONTAINER_KEYS:
        if isinstance(doc.get(key), list):
            return doc[key]

    for value in doc.values():
        if isinstance(value, list):
            return value
    return []

# -----------------------------------------------------------------------------
# Field resolver
# -----------------------------------------------------------------------------

FIELD_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    "name":       ("name", "title", "petName", "eggName", "displayName", "itemName", "item_name"),
    "tokenValue": ("value", "tokenValue", "token_value", "tokens", "worth", "rap"),
    "cost":       ("price", "cost", "eggPrice", "egg_price", "clicks", "clickCost"),
    "exist":      ("exist", "exists", "existCount", "count", "amount"),
    "percent":    ("percent", "percentage", "pct", "discount"),
    "offering":   ("offering", "offer", "offers", "giving", "has"),
    "wanting":    ("wanting", "want", "wants", "looking_for", "lookingFor"),
}

NUMERIC_FIELDS = frozenset({"tokenValue", "cost", "exist", "percent"})
TEXT_FIELDS = frozenset({"offering", "wanting"})

UNKNOWN_NAME = "Unknown"

NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")

# Deep search gives up below this many levels of nesting.
MAX_DEPTH = 32


def _candidates(field: str) -> Tuple[str, ...]:
    try:
        return FIELD_CANDIDATES[field]
    except KeyError:
        raise ValueError(f"unknown field: {field!r}") from None


def to_number(value: Any) -> Optional[Number]:
    """Coerce a JSON leaf to int/float, or None if it isn't numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        s = value.strip().replace(",", "").replace("_", "")
        if not NUMERIC_RE.match(s):
            return None
        if "." not in s:
            try:
                return int(s)
            except ValueError:  # past the interpreter's int-string digit limit
                return None
        num = float(s)
        return num if math.isfinite(num) else None
    return None


def find_number(node: Any, depth: int = 0) -> Optional[Number]:
    """Depth-first search of nested dicts/lists for the first numeric leaf."""
    if depth > MAX_DEPTH:
        return None
    if isinstance(node, dict):
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return to_number(node)

    for child in children:
        found = find_number(child, depth + 1)
        if found is not None:
            return found
    return None


def resolve_number(record: Any, field: str) -> Optional[Number]:
    if not isinstance(record, Mapping):
        return None
    for key in _candidates(field):
        if key not in record:
            continue
        found = find_number(record[key])
        if found is not None:
            return found
    return None


def resolve_string(record: Any, field: str) -> Optional[str]:
    if not isinstance(record, Mapping):
        return None
    for key in _candidates(field):
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def resolve_name(record: Any) -> str:
    return resolve_string(record, "name") or UNKNOWN_NAME


def resolve_text(record: Any, field: str) -> Optional[str]:
    """
    Like resolve_string, but also renders list values (trade ads list their
    pets as strings or as little records) as a comma-joined string.
    """
    if not isinstance(record, Mapping):
        return None
    for key in _candidates(field):
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, list):
            parts: List[str] = []
            for v in value:
                if isinstance(v, str) and v.strip():
                    parts.append(v.strip())
                elif isinstance(v, Mapping):
                    nm = resolve_string(v, "name")
                    if nm:
                        parts.append(nm)
            if parts:
                return ", ".join(parts)
    return None


def resolve_field(record: Any, field: str) -> Union[str, Number, None]:
    """Resolve any semantic field listed in FIELD_CANDIDATES."""
    if field == "name":
        return resolve_name(record)
    if field in NUMERIC_FIELDS:
        return resolve_number(record, field)
    if field in TEXT_FIELDS:
        return resolve_text(record, field)
    return resolve_string(record, field)
