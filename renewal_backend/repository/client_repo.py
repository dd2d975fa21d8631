from __future__ import annotations

from sqlite3 import Connection
from typing import Any, Mapping

from . import build_update

COLUMNS = ("name", "email", "phone", "company", "address", "gst", "notes")


def list_all(conn: Connection):
    return conn.execute("SELECT * FROM clients ORDER BY name ASC").fetchall()


def get_one(conn: Connection, client_id: int):
    return conn.execute("SELECT * FROM clients WHERE id=?", (client_id,)).fetchone()


def insert(conn: Connection, fields: Mapping[str, Any]) -> int:
    cur = conn.execute(
        "INSERT INTO clients(name, email, phone, company, address, gst, notes) VALUES(?,?,?,?,?,?,?)",
        tuple(fields.get(c) for c in COLUMNS),
    )
    return int(cur.lastrowid)


def update(conn: Connection, client_id: int, fields: Mapping[str, Any]) -> int:
    sql, params = build_update("clients", fields, COLUMNS)
    return conn.execute(sql, (*params, client_id)).rowcount


def delete(conn: Connection, client_id: int) -> int:
    return conn.execute("DELETE FROM clients WHERE id=?", (client_id,)).rowcount


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM clients").fetchone()["c"])
