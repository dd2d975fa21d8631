from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Mapping

from . import build_update, to_db

COLUMNS = ("client_id", "service_id", "start_date", "end_date", "amount", "is_paid", "notes")

# Renewal joined with the reduced client/service views.
_WITH_RELATIONS_SQL = """
SELECT r.id, r.client_id, r.service_id, r.start_date, r.end_date, r.amount,
       r.is_paid, r.is_notified, r.notes, r.created_at,
       c.name AS client_name, c.email AS client_email, c.company AS client_company,
       s.name AS service_name
FROM renewals r
JOIN clients c ON c.id = r.client_id
JOIN services s ON s.id = r.service_id
"""


def list_all(conn: Connection):
    return conn.execute("SELECT * FROM renewals ORDER BY end_date ASC, id ASC").fetchall()


def get_one(conn: Connection, renewal_id: int):
    return conn.execute("SELECT * FROM renewals WHERE id=?", (renewal_id,)).fetchone()


def list_by_client(conn: Connection, client_id: int):
    return conn.execute(
        "SELECT * FROM renewals WHERE client_id=? ORDER BY end_date ASC, id ASC", (client_id,)
    ).fetchall()


def list_by_service(conn: Connection, service_id: int):
    return conn.execute(
        "SELECT * FROM renewals WHERE service_id=? ORDER BY end_date ASC, id ASC", (service_id,)
    ).fetchall()


def exists_for_client(conn: Connection, client_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM renewals WHERE client_id=? LIMIT 1", (client_id,)).fetchone()
    return row is not None


def exists_for_service(conn: Connection, service_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM renewals WHERE service_id=? LIMIT 1", (service_id,)).fetchone()
    return row is not None


def list_with_relations(conn: Connection, start_dash: str | None = None, end_dash: str | None = None):
    """Joined rows, optionally limited to start_dash <= end_date <= end_dash."""
    sql = _WITH_RELATIONS_SQL
    where = []
    params: list = []
    if start_dash:
        where.append("r.end_date >= ?")
        params.append(start_dash)
    if end_dash:
        where.append("r.end_date <= ?")
        params.append(end_dash)
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY r.end_date ASC, r.id ASC"
    return conn.execute(sql, params).fetchall()


def get_with_relations(conn: Connection, renewal_id: int):
    return conn.execute(_WITH_RELATIONS_SQL + " WHERE r.id = ?", (renewal_id,)).fetchone()


def insert(conn: Connection, fields: Mapping[str, Any]) -> int:
    cur = conn.execute(
        "INSERT INTO renewals(client_id, service_id, start_date, end_date, amount, is_paid, is_notified, notes) "
        "VALUES(?,?,?,?,?,?,0,?)",
        (
            fields["client_id"],
            fields["service_id"],
            to_db(fields["start_date"]),
            to_db(fields["end_date"]),
            fields["amount"],
            to_db(bool(fields.get("is_paid"))),
            fields.get("notes"),
        ),
    )
    return int(cur.lastrowid)


def update(conn: Connection, renewal_id: int, fields: Mapping[str, Any]) -> int:
    sql, params = build_update("renewals", fields, COLUMNS)
    return conn.execute(sql, (*params, renewal_id)).rowcount


def set_notified(conn: Connection, renewal_id: int, sent: bool) -> int:
    return conn.execute(
        "UPDATE renewals SET is_notified=? WHERE id=?", (1 if sent else 0, renewal_id)
    ).rowcount


def delete(conn: Connection, renewal_id: int) -> int:
    return conn.execute("DELETE FROM renewals WHERE id=?", (renewal_id,)).rowcount
