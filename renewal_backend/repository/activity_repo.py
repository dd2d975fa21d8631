from __future__ import annotations

from sqlite3 import Connection


def insert(conn: Connection, type_: str, description: str, metadata: str | None) -> int:
    cur = conn.execute(
        "INSERT INTO activities(type, description, metadata) VALUES(?,?,?)",
        (type_, description, metadata),
    )
    return int(cur.lastrowid)


def get_one(conn: Connection, activity_id: int):
    return conn.execute("SELECT * FROM activities WHERE id=?", (activity_id,)).fetchone()


def list_recent(conn: Connection, limit: int | None = None):
    sql = "SELECT * FROM activities ORDER BY created_at DESC, id DESC"
    if limit:
        return conn.execute(sql + " LIMIT ?", (int(limit),)).fetchall()
    return conn.execute(sql).fetchall()


def search(conn: Connection, type_: str | None, ts_from: str | None, ts_to: str | None, page: int, size: int):
    where = []
    params: dict = {}
    if type_:
        where.append("type = :type")
        params["type"] = type_
    if ts_from:
        where.append("created_at >= :from")
        params["from"] = ts_from
    if ts_to:
        where.append("created_at <= :to")
        params["to"] = ts_to
    wh = " WHERE " + " AND ".join(where) if where else ""
    total = conn.execute(f"SELECT COUNT(1) AS cnt FROM activities{wh}", params).fetchone()["cnt"]
    rows = conn.execute(
        f"SELECT * FROM activities{wh} ORDER BY created_at DESC, id DESC LIMIT :limit OFFSET :offset",
        {**params, "limit": size, "offset": (page - 1) * size},
    ).fetchall()
    return int(total), rows
