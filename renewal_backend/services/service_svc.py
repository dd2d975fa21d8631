from __future__ import annotations

# renewal_backend/services/service_svc.py
from ..db import get_conn, transaction
from ..errors import ConflictError, store_errors
from ..models import ServiceCreate, ServiceUpdate, coerce, supplied_fields
from ..repository import service_repo, renewal_repo


def list_services() -> list[dict]:
    with store_errors("fetching services"), get_conn() as conn:
        return [dict(r) for r in service_repo.list_all(conn)]


def get_service(service_id: int) -> dict | None:
    with store_errors(f"fetching service with id {service_id}"), get_conn() as conn:
        row = service_repo.get_one(conn, service_id)
    return dict(row) if row else None


def create_service(data: ServiceCreate | dict) -> dict:
    fields = coerce(ServiceCreate, data).model_dump()
    with store_errors("creating service"), get_conn() as conn:
        with transaction(conn):
            new_id = service_repo.insert(conn, fields)
        return dict(service_repo.get_one(conn, new_id))


def update_service(service_id: int, data: ServiceUpdate | dict) -> dict | None:
    fields = supplied_fields(ServiceUpdate, data)
    with store_errors(f"updating service with id {service_id}"), get_conn() as conn:
        before = service_repo.get_one(conn, service_id)
        if before is None:
            return None
        if not fields:
            return dict(before)
        with transaction(conn):
            service_repo.update(conn, service_id, fields)
        return dict(service_repo.get_one(conn, service_id))


def delete_service(service_id: int) -> bool:
    """Same contract as delete_client, guarded on renewals.service_id."""
    with store_errors(f"deleting service with id {service_id}"), get_conn() as conn:
        with transaction(conn):
            if service_repo.get_one(conn, service_id) is None:
                return False
            if renewal_repo.exists_for_service(conn, service_id):
                raise ConflictError(
                    "Cannot delete service with active renewals. Please delete related renewals first."
                )
            service_repo.delete(conn, service_id)
    return True
