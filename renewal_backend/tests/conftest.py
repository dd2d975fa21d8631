import os
import sys
import sqlite3
import pytest
from datetime import date
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "renewals_test.db"
    # Point the backend to this temp DB
    os.environ["RENEWAL_DB_PATH"] = str(path)
    from renewal_backend.db import ensure_schema
    ensure_schema(str(path))
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("RENEWAL_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    tables = [
        "activities",
        "renewals",
        "clients",
        "services",
        "config",
    ]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
        # restart AUTOINCREMENT ids
        conn.execute("DELETE FROM sqlite_sequence")
        conn.commit()
    finally:
        conn.close()
    from renewal_backend.services.config_svc import ensure_default_config
    ensure_default_config()
    yield


@pytest.fixture()
def today():
    return date.today()


@pytest.fixture()
def make_client():
    from renewal_backend.services.client_svc import create_client

    def _make(name="Acme Ltd", email="ops@acme.test", **extra):
        return create_client({"name": name, "email": email, **extra})
    return _make


@pytest.fixture()
def make_service():
    from renewal_backend.services.service_svc import create_service

    def _make(name="Hosting", default_price=100.0, default_duration=12, **extra):
        return create_service({
            "name": name,
            "default_price": default_price,
            "default_duration": default_duration,
            **extra,
        })
    return _make


@pytest.fixture()
def make_renewal(make_client, make_service, today):
    from renewal_backend.services.renewal_svc import create_renewal

    def _make(client_id=None, service_id=None, end_date=None, amount=100.0, is_paid=False, **extra):
        if client_id is None:
            client_id = make_client()["id"]
        if service_id is None:
            service_id = make_service()["id"]
        return create_renewal({
            "client_id": client_id,
            "service_id": service_id,
            "start_date": extra.pop("start_date", today),
            "end_date": end_date or today,
            "amount": amount,
            "is_paid": is_paid,
            **extra,
        })
    return _make
