from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Mapping

from . import build_update

COLUMNS = ("name", "description", "default_price", "default_duration")


def list_all(conn: Connection):
    return conn.execute("SELECT * FROM services ORDER BY name ASC").fetchall()


def get_one(conn: Connection, service_id: int):
    return conn.execute("SELECT * FROM services WHERE id=?", (service_id,)).fetchone()


def insert(conn: Connection, fields: Mapping[str, Any]) -> int:
    cur = conn.execute(
        "INSERT INTO services(name, description, default_price, default_duration) VALUES(?,?,?,?)",
        tuple(fields.get(c) for c in COLUMNS),
    )
    return int(cur.lastrowid)


def update(conn: Connection, service_id: int, fields: Mapping[str, Any]) -> int:
    sql, params = build_update("services", fields, COLUMNS)
    return conn.execute(sql, (*params, service_id)).rowcount


def delete(conn: Connection, service_id: int) -> int:
    return conn.execute("DELETE FROM services WHERE id=?", (service_id,)).rowcount


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM services").fetchone()["c"])
