"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping


def to_db(value: Any) -> Any:
    """Adapt Python values to their stored form (dates as text, bools as 0/1)."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, date):
        return value.isoformat()
    return value


def build_update(table: str, fields: Mapping[str, Any], allowed: Iterable[str]) -> tuple[str, list]:
    """
    Translate {column: value} into "UPDATE table SET a=?, b=? WHERE id=?".
    Only columns in `allowed` are written; the caller appends the id param.
    """
    allowed = set(allowed)
    cols = [k for k in fields if k in allowed]
    if not cols:
        raise ValueError("no_fields_to_update")
    sql = "UPDATE {} SET {} WHERE id=?".format(table, ", ".join(f"{c}=?" for c in cols))
    return sql, [to_db(fields[c]) for c in cols]
