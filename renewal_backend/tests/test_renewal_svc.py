from __future__ import annotations

import json
import sqlite3
from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from renewal_backend.db import get_conn
from renewal_backend.errors import StoreError
from renewal_backend.repository import activity_repo
from renewal_backend.services import activity_svc, renewal_svc


def _types():
    """Activity types, newest first."""
    return [a["type"] for a in activity_svc.list_activities()]


def test_create_forces_not_notified_and_logs_activity(make_client, make_service):
    c = make_client()
    s = make_service()
    r = renewal_svc.create_renewal({
        "client_id": c["id"],
        "service_id": s["id"],
        "start_date": "2026-01-01",
        "end_date": "2026-12-31",
        "amount": 250,
        "is_notified": True,  # not creatable, ignored
    })
    assert r["is_notified"] is False
    assert r["is_paid"] is False
    assert r["start_date"] == "2026-01-01"
    assert r["end_date"] == "2026-12-31"
    assert r["amount"] == 250
    assert r["created_at"]
    assert renewal_svc.get_renewal(r["id"]) == r

    acts = activity_svc.list_activities()
    assert len(acts) == 1
    assert acts[0]["type"] == "renewal_created"
    assert acts[0]["description"] == "New renewal created for service ending on 12/31/2026"
    meta = json.loads(acts[0]["metadata"])
    assert meta == {"renewal_id": r["id"], "client_id": c["id"], "service_id": s["id"], "amount": 250.0}


def test_create_rolls_back_when_activity_fails(make_client, make_service, monkeypatch):
    c = make_client()
    s = make_service()

    def boom(*a, **kw):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(activity_repo, "insert", boom)
    with pytest.raises(StoreError):
        renewal_svc.create_renewal({
            "client_id": c["id"], "service_id": s["id"],
            "start_date": "2026-01-01", "end_date": "2026-06-30", "amount": 10,
        })
    assert renewal_svc.list_renewals() == []


def test_create_with_unknown_client_is_store_error(make_service):
    s = make_service()
    with pytest.raises(StoreError):
        renewal_svc.create_renewal({
            "client_id": 999, "service_id": s["id"],
            "start_date": "2026-01-01", "end_date": "2026-06-30", "amount": 10,
        })
    assert activity_svc.list_activities() == []


def test_lists_are_ordered_by_end_date(make_client, make_service, make_renewal, today):
    c1, c2 = make_client(name="A", email="a@t"), make_client(name="B", email="b@t")
    s = make_service()
    r_late = make_renewal(c1["id"], s["id"], end_date=today + timedelta(days=40))
    r_early = make_renewal(c1["id"], s["id"], end_date=today + timedelta(days=5))
    r_other = make_renewal(c2["id"], s["id"], end_date=today + timedelta(days=10))

    assert [r["id"] for r in renewal_svc.list_renewals()] == [r_early["id"], r_other["id"], r_late["id"]]
    assert [r["id"] for r in renewal_svc.list_renewals_by_client(c1["id"])] == [r_early["id"], r_late["id"]]
    assert [r["id"] for r in renewal_svc.list_renewals_by_service(s["id"])] == [
        r_early["id"], r_other["id"], r_late["id"]
    ]
    assert renewal_svc.list_renewals_by_client(12345) == []


def test_with_relations_projection(make_client, make_service, make_renewal):
    c = make_client(name="Initech", email="bill@initech.test", company="Initech", phone="555")
    s = make_service(name="Support")
    r = make_renewal(c["id"], s["id"], amount=75)
    renewal_svc.set_notification_status(r["id"], True)

    out = renewal_svc.get_renewal_with_relations(r["id"])
    assert out["notification_sent"] is True
    assert "is_notified" not in out
    assert out["is_paid"] is False
    assert out["client"] == {"id": c["id"], "name": "Initech", "email": "bill@initech.test", "company": "Initech"}
    assert out["service"] == {"id": s["id"], "name": "Support"}
    assert renewal_svc.list_renewals_with_relations() == [out]
    assert renewal_svc.get_renewal_with_relations(777) is None


def test_upcoming_window_is_inclusive(make_client, make_service, make_renewal):
    on = date(2026, 10, 17)
    c, s = make_client(), make_service()
    inside = make_renewal(c["id"], s["id"], end_date=on + timedelta(days=29))
    edge_start = make_renewal(c["id"], s["id"], end_date=on)
    edge_end = make_renewal(c["id"], s["id"], end_date=on + timedelta(days=30))
    make_renewal(c["id"], s["id"], end_date=on + timedelta(days=31))
    make_renewal(c["id"], s["id"], end_date=on - timedelta(days=1))

    ids = [r["id"] for r in renewal_svc.list_upcoming_renewals(30, on_date=on)]
    assert ids == [edge_start["id"], inside["id"], edge_end["id"]]
    assert [r["id"] for r in renewal_svc.list_upcoming_renewals(on_date=on)] == ids


def test_upcoming_defaults_to_today(make_renewal, today):
    r = make_renewal(end_date=today + timedelta(days=1))
    assert [x["id"] for x in renewal_svc.list_upcoming_renewals()] == [r["id"]]


def test_update_partial_keeps_other_fields(make_renewal):
    r = make_renewal(amount=100, notes="first")
    out = renewal_svc.update_renewal(r["id"], {"notes": "second"})
    assert out["notes"] == "second"
    assert out["amount"] == 100
    assert out["end_date"] == r["end_date"]
    assert out["created_at"] == r["created_at"]


def test_empty_update_emits_nothing(make_renewal):
    r = make_renewal()
    before = _types()
    assert renewal_svc.update_renewal(r["id"], {}) == r
    assert _types() == before


def test_update_missing_renewal():
    assert renewal_svc.update_renewal(404, {"amount": 1}) is None
    assert activity_svc.list_activities() == []


def test_mark_paid_emits_payment_and_update(make_renewal):
    r = make_renewal(amount=100, is_paid=False)
    out = renewal_svc.update_renewal(r["id"], {"is_paid": True})
    assert out["is_paid"] is True

    acts = activity_svc.list_activities()
    assert [a["type"] for a in acts] == ["renewal_updated", "payment_received", "renewal_created"]
    payment = json.loads(acts[1]["metadata"])
    assert payment == {"renewal_id": r["id"], "client_id": r["client_id"], "amount": 100.0}
    assert acts[1]["description"] == f"Payment of 100 received for renewal"
    assert json.loads(acts[0]["metadata"])["changes"] == "is_paid"


def test_mark_paid_uses_new_amount_when_supplied(make_renewal):
    r = make_renewal(amount=100)
    renewal_svc.update_renewal(r["id"], {"is_paid": True, "amount": 120})
    payment = next(a for a in activity_svc.list_activities() if a["type"] == "payment_received")
    assert json.loads(payment["metadata"])["amount"] == 120
    updated = next(a for a in activity_svc.list_activities() if a["type"] == "renewal_updated")
    assert json.loads(updated["metadata"])["changes"] == "amount, is_paid"


def test_paid_to_paid_only_logs_update(make_renewal):
    r = make_renewal(is_paid=True)
    renewal_svc.update_renewal(r["id"], {"is_paid": True})
    assert _types() == ["renewal_updated", "renewal_created"]


def test_notification_status(make_renewal):
    r = make_renewal(end_date=date(2026, 11, 5))
    out = renewal_svc.set_notification_status(r["id"], True)
    assert out["is_notified"] is True
    acts = activity_svc.list_activities()
    assert acts[0]["type"] == "notification_sent"
    assert acts[0]["description"] == "Notification sent for renewal due on 11/5/2026"

    out = renewal_svc.set_notification_status(r["id"], False)
    assert out["is_notified"] is False
    assert _types() == ["notification_sent", "renewal_created"]


def test_notification_status_missing_renewal():
    assert renewal_svc.set_notification_status(55, True) is None
    assert activity_svc.list_activities() == []


def test_delete_renewal_logs_activity(make_renewal):
    r = make_renewal(amount=42)
    assert renewal_svc.delete_renewal(r["id"]) is True
    assert renewal_svc.get_renewal(r["id"]) is None

    act = activity_svc.list_activities(limit=1)[0]
    assert act["type"] == "renewal_deleted"
    assert act["description"] == f"Renewal #{r['id']} deleted"
    assert json.loads(act["metadata"]) == {
        "renewal_id": r["id"], "client_id": r["client_id"], "service_id": r["service_id"], "amount": 42.0,
    }
    assert renewal_svc.delete_renewal(r["id"]) is False


def test_flags_stored_as_integers(make_renewal):
    r = make_renewal(is_paid=True)
    with get_conn() as conn:
        row = conn.execute("SELECT is_paid, is_notified FROM renewals WHERE id=?", (r["id"],)).fetchone()
    assert row["is_paid"] == 1
    assert row["is_notified"] == 0


def test_payment_description_keeps_fractional_amount(make_renewal):
    r = make_renewal(amount=99.5)
    renewal_svc.update_renewal(r["id"], {"is_paid": True})
    payment = next(a for a in activity_svc.list_activities() if a["type"] == "payment_received")
    assert payment["description"] == "Payment of 99.5 received for renewal"


def test_update_rejects_null_for_required_fields(make_renewal):
    r = make_renewal(notes="keep")
    for field in ("amount", "end_date", "client_id", "is_paid"):
        with pytest.raises(ValidationError):
            renewal_svc.update_renewal(r["id"], {field: None})
    assert renewal_svc.get_renewal(r["id"]) == r
    assert _types() == ["renewal_created"]

    # nullable columns can still be cleared
    assert renewal_svc.update_renewal(r["id"], {"notes": None})["notes"] is None


def test_failed_rollback_does_not_hide_original_error(make_renewal, monkeypatch):
    r = make_renewal()

    def fail_and_end_txn(conn, *a, **kw):
        # SQLite already rolled back on its own (e.g. SQLITE_FULL)
        conn.execute("ROLLBACK")
        raise sqlite3.OperationalError("database or disk is full")

    monkeypatch.setattr(activity_repo, "insert", fail_and_end_txn)
    with pytest.raises(StoreError) as ei:
        renewal_svc.delete_renewal(r["id"])
    assert "disk is full" in str(ei.value)
    assert renewal_svc.get_renewal(r["id"]) == r
