from __future__ import annotations

# renewal_backend/services/renewal_svc.py
import logging
from datetime import date

from ..db import get_conn, transaction
from ..errors import store_errors
from ..models import RenewalCreate, RenewalUpdate, coerce, supplied_fields
from ..repository import renewal_repo
from .activity_svc import record_activity
from .config_svc import get_config
from .utils import add_days, display_date, to_dash, today

logger = logging.getLogger(__name__)


def _renewal(row) -> dict:
    """Stored row -> dict with 0/1 flags as bools."""
    out = dict(row)
    out["is_paid"] = bool(out["is_paid"])
    out["is_notified"] = bool(out["is_notified"])
    return out


def _with_relations(row) -> dict:
    return {
        "id": row["id"],
        "client_id": row["client_id"],
        "service_id": row["service_id"],
        "start_date": row["start_date"],
        "end_date": row["end_date"],
        "amount": row["amount"],
        "is_paid": bool(row["is_paid"]),
        "notification_sent": bool(row["is_notified"]),
        "notes": row["notes"],
        "created_at": row["created_at"],
        "client": {
            "id": row["client_id"],
            "name": row["client_name"],
            "email": row["client_email"],
            "company": row["client_company"],
        },
        "service": {
            "id": row["service_id"],
            "name": row["service_name"],
        },
    }


def _amount_text(v) -> str:
    """100.0 -> "100", 99.5 -> "99.5"."""
    v = float(v)
    return str(int(v)) if v.is_integer() else repr(v)


# ---------------- reads ----------------

def list_renewals() -> list[dict]:
    with store_errors("fetching renewals"), get_conn() as conn:
        return [_renewal(r) for r in renewal_repo.list_all(conn)]


def get_renewal(renewal_id: int) -> dict | None:
    with store_errors(f"fetching renewal with id {renewal_id}"), get_conn() as conn:
        row = renewal_repo.get_one(conn, renewal_id)
    return _renewal(row) if row else None


def list_renewals_by_client(client_id: int) -> list[dict]:
    with store_errors(f"fetching renewals for client {client_id}"), get_conn() as conn:
        return [_renewal(r) for r in renewal_repo.list_by_client(conn, client_id)]


def list_renewals_by_service(service_id: int) -> list[dict]:
    with store_errors(f"fetching renewals for service {service_id}"), get_conn() as conn:
        return [_renewal(r) for r in renewal_repo.list_by_service(conn, service_id)]


def list_renewals_with_relations() -> list[dict]:
    with store_errors("fetching renewals with relations"), get_conn() as conn:
        return [_with_relations(r) for r in renewal_repo.list_with_relations(conn)]


def get_renewal_with_relations(renewal_id: int) -> dict | None:
    with store_errors(f"fetching renewal with relations for id {renewal_id}"), get_conn() as conn:
        row = renewal_repo.get_with_relations(conn, renewal_id)
    return _with_relations(row) if row else None


def list_upcoming_renewals(days: int | None = None, on_date: date | None = None) -> list[dict]:
    """Renewals whose end_date falls in [on_date, on_date + days], both ends inclusive."""
    if days is None:
        days = get_config()["upcoming_days"]
    start = on_date or today()
    end = add_days(start, days)
    with store_errors(f"fetching upcoming renewals for next {days} days"), get_conn() as conn:
        rows = renewal_repo.list_with_relations(conn, to_dash(start), to_dash(end))
    return [_with_relations(r) for r in rows]


# ---------------- writes ----------------

def create_renewal(data: RenewalCreate | dict) -> dict:
    """
    Insert a renewal (is_notified always starts false) and log `renewal_created`
    in the same transaction.
    """
    rn = coerce(RenewalCreate, data)
    fields = rn.model_dump()
    with store_errors("creating renewal"), get_conn() as conn:
        with transaction(conn):
            new_id = renewal_repo.insert(conn, fields)
            record_activity(
                conn,
                "renewal_created",
                f"New renewal created for service ending on {display_date(rn.end_date)}",
                {
                    "renewal_id": new_id,
                    "client_id": rn.client_id,
                    "service_id": rn.service_id,
                    "amount": rn.amount,
                },
            )
        out = _renewal(renewal_repo.get_one(conn, new_id))
    logger.info(f"renewal {new_id} created for client {rn.client_id}")
    return out


def update_renewal(renewal_id: int, data: RenewalUpdate | dict) -> dict | None:
    """
    Partial update. Returns None when the renewal does not exist and the
    unchanged row when nothing was supplied (no activity either).

    Activities, appended in the same transaction as the UPDATE:
    - payment_received when is_paid goes false -> true
    - renewal_updated whenever at least one field was supplied
    """
    fields = supplied_fields(RenewalUpdate, data)
    with store_errors(f"updating renewal with id {renewal_id}"), get_conn() as conn:
        with transaction(conn):
            before = renewal_repo.get_one(conn, renewal_id)
            if before is None:
                return None
            if not fields:
                return _renewal(before)

            renewal_repo.update(conn, renewal_id, fields)

            if fields.get("is_paid") and not before["is_paid"]:
                amount = fields["amount"] if fields.get("amount") is not None else before["amount"]
                record_activity(
                    conn,
                    "payment_received",
                    f"Payment of {_amount_text(amount)} received for renewal",
                    {"renewal_id": renewal_id, "client_id": before["client_id"], "amount": amount},
                )

            record_activity(
                conn,
                "renewal_updated",
                f"Renewal #{renewal_id} updated",
                {
                    "renewal_id": renewal_id,
                    "client_id": before["client_id"],
                    "service_id": before["service_id"],
                    "changes": ", ".join(fields),
                },
            )
        return _renewal(renewal_repo.get_one(conn, renewal_id))


def set_notification_status(renewal_id: int, sent: bool) -> dict | None:
    """
    Flip is_notified. Setting it to true appends `notification_sent`;
    clearing it appends nothing. Returns the renewal, or None if it does not exist.
    """
    with store_errors(f"updating notification status for renewal {renewal_id}"), get_conn() as conn:
        with transaction(conn):
            if not renewal_repo.set_notified(conn, renewal_id, sent):
                return None
            row = renewal_repo.get_one(conn, renewal_id)
            if sent:
                record_activity(
                    conn,
                    "notification_sent",
                    f"Notification sent for renewal due on {display_date(row['end_date'])}",
                    {"renewal_id": renewal_id, "client_id": row["client_id"], "service_id": row["service_id"]},
                )
    return _renewal(row)


def delete_renewal(renewal_id: int) -> bool:
    with store_errors(f"deleting renewal with id {renewal_id}"), get_conn() as conn:
        with transaction(conn):
            before = renewal_repo.get_one(conn, renewal_id)
            if before is None:
                return False
            renewal_repo.delete(conn, renewal_id)
            record_activity(
                conn,
                "renewal_deleted",
                f"Renewal #{renewal_id} deleted",
                {
                    "renewal_id": renewal_id,
                    "client_id": before["client_id"],
                    "service_id": before["service_id"],
                    "amount": before["amount"],
                },
            )
    logger.info(f"renewal {renewal_id} deleted")
    return True
