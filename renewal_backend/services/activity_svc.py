from __future__ import annotations

# renewal_backend/services/activity_svc.py
import json
from sqlite3 import Connection
from typing import Any

from ..db import get_conn, transaction
from ..errors import store_errors
from ..models import ActivityCreate, coerce
from ..repository import activity_repo


def _serialize(metadata: Any) -> str | None:
    if metadata is None or isinstance(metadata, str):
        return metadata
    return json.dumps(metadata, ensure_ascii=False)


def record_activity(conn: Connection, type_: str, description: str, metadata: Any = None) -> dict:
    """Append to the activity log on an open connection (joins the caller's transaction)."""
    act = coerce(ActivityCreate, {"type": type_, "description": description, "metadata": metadata})
    new_id = activity_repo.insert(conn, act.type, act.description, _serialize(act.metadata))
    return dict(activity_repo.get_one(conn, new_id))


def list_activities(limit: int | None = None) -> list[dict]:
    with store_errors("fetching activities"), get_conn() as conn:
        return [dict(r) for r in activity_repo.list_recent(conn, limit)]


def get_activity(activity_id: int) -> dict | None:
    with store_errors(f"fetching activity with id {activity_id}"), get_conn() as conn:
        row = activity_repo.get_one(conn, activity_id)
    return dict(row) if row else None


def create_activity(data: ActivityCreate | dict) -> dict:
    act = coerce(ActivityCreate, data)
    with store_errors("creating activity"), get_conn() as conn:
        with transaction(conn):
            return record_activity(conn, act.type, act.description, act.metadata)


def search_activities(
    type_: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    page: int = 1,
    size: int = 20,
) -> tuple[int, list[dict]]:
    """Paged activity search; ts_from/ts_to compare against created_at text."""
    with store_errors("searching activities"), get_conn() as conn:
        total, rows = activity_repo.search(conn, type_, ts_from, ts_to, page, size)
    return total, [dict(r) for r in rows]
