from __future__ import annotations

# renewal_backend/services/config_svc.py
from ..db import get_conn, transaction
from ..errors import store_errors

DEFAULTS = {
    # "upcoming" window for list_upcoming_renewals and the dashboard count
    "upcoming_days": "30",
    "projection_months": "12",
    "revenue_months": "6",
}


def ensure_default_config():
    """Insert missing keys without overwriting existing values."""
    with store_errors("seeding default config"), get_conn() as conn:
        for k, v in DEFAULTS.items():
            conn.execute(
                "INSERT INTO config(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (k, v),
            )


def _to_int(v, default: str) -> int:
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return int(default)


def get_config() -> dict:
    with store_errors("fetching config"), get_conn() as conn:
        rows = conn.execute("SELECT key, value FROM config").fetchall()
    cfg = {r["key"]: r["value"] for r in rows}

    return {k: _to_int(cfg.get(k, d), d) for k, d in DEFAULTS.items()}


def update_config(upd: dict) -> list[str]:
    unknown = [k for k in upd if k not in DEFAULTS]
    if unknown:
        raise ValueError(f"unknown_config_key: {', '.join(unknown)}")
    with store_errors("updating config"), get_conn() as conn:
        with transaction(conn):
            for k, v in upd.items():
                conn.execute(
                    "INSERT INTO config(key,value) VALUES(?,?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (k, str(v))
                )
    return list(upd)
