from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple


DEFAULT_STATUS = "not_visited"
DO_NOT_CALL_STATUS = "do_not_call"

MAX_BULK_ADDRESSES = 500
MAX_SCAN_CHARS = 50000
MAX_LOOKUP_RESULTS = 500


def resolve_status(status: Optional[str], do_not_call: Optional[bool] = None) -> Tuple[str, bool]:
    resolved = status or DEFAULT_STATUS
    flag = bool(do_not_call)
    if resolved == DO_NOT_CALL_STATUS:
        flag = True
    if flag:
        resolved = DO_NOT_CALL_STATUS
    return resolved, flag


def _composite_key(row: Dict[str, Any], fields: Iterable[str]) -> str:
    return "|".join(str(row.get(name) or "").strip() for name in fields).strip().lower()


def batch_key(row: Dict[str, Any]) -> str:
    return _composite_key(row, ("civic_number", "street", "unit"))


def lookup_key(row: Dict[str, Any]) -> str:
    return _composite_key(row, ("civic_number", "street", "postal_code"))


def unique_by(rows: Iterable[Dict[str, Any]], key: Callable[[Dict[str, Any]], str]) -> List[Dict[str, Any]]:
    seen: Set[str] = set()
    unique_rows: List[Dict[str, Any]] = []
    for row in rows:
        value = key(row)
        if value in seen:
            continue
        seen.add(value)
        unique_rows.append(row)
    return unique_rows


def retain_candidates(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [row for row in rows if row.get("street") or row.get("label")]
