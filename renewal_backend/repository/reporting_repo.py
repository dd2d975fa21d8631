from sqlite3 import Connection


def count_end_between(conn: Connection, start_dash: str, end_dash: str) -> int:
    return int(conn.execute(
        "SELECT COUNT(1) AS c FROM renewals WHERE end_date BETWEEN ? AND ?",
        (start_dash, end_dash),
    ).fetchone()["c"])


def count_overdue(conn: Connection, today_dash: str) -> int:
    return int(conn.execute(
        "SELECT COUNT(1) AS c FROM renewals WHERE end_date < ? AND is_paid = 0",
        (today_dash,),
    ).fetchone()["c"])


def sum_paid(conn: Connection, since_dash: str | None = None) -> float:
    sql = "SELECT COALESCE(SUM(amount), 0) AS total FROM renewals WHERE is_paid = 1"
    params: tuple = ()
    if since_dash:
        sql += " AND end_date >= ?"
        params = (since_dash,)
    return float(conn.execute(sql, params).fetchone()["total"])


def sum_end_between(conn: Connection, start_dash: str, end_dash: str) -> float:
    return float(conn.execute(
        "SELECT COALESCE(SUM(amount), 0) AS total FROM renewals WHERE end_date BETWEEN ? AND ?",
        (start_dash, end_dash),
    ).fetchone()["total"])



def paid_amounts_between(conn: Connection, start_dash: str, end_dash: str):
    """Columns: end_date, amount"""
    return conn.execute(
        "SELECT end_date, amount FROM renewals "
        "WHERE is_paid = 1 AND end_date BETWEEN ? AND ? "
        "ORDER BY end_date ASC",
        (start_dash, end_dash),
    ).fetchall()
