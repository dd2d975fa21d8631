from __future__ import annotations

# renewal_backend/services/client_svc.py
from ..db import get_conn, transaction
from ..errors import ConflictError, store_errors
from ..models import ClientCreate, ClientUpdate, coerce, supplied_fields
from ..repository import client_repo, renewal_repo


def list_clients() -> list[dict]:
    with store_errors("fetching clients"), get_conn() as conn:
        return [dict(r) for r in client_repo.list_all(conn)]


def get_client(client_id: int) -> dict | None:
    with store_errors(f"fetching client with id {client_id}"), get_conn() as conn:
        row = client_repo.get_one(conn, client_id)
    return dict(row) if row else None


def create_client(data: ClientCreate | dict) -> dict:
    fields = coerce(ClientCreate, data).model_dump()
    with store_errors("creating client"), get_conn() as conn:
        with transaction(conn):
            new_id = client_repo.insert(conn, fields)
        return dict(client_repo.get_one(conn, new_id))


def update_client(client_id: int, data: ClientUpdate | dict) -> dict | None:
    """
    Partial update: only fields the caller supplied are written.
    Returns the stored row afterwards, or None when the client does not exist.
    """
    fields = supplied_fields(ClientUpdate, data)
    with store_errors(f"updating client with id {client_id}"), get_conn() as conn:
        before = client_repo.get_one(conn, client_id)
        if before is None:
            return None
        if not fields:
            return dict(before)
        with transaction(conn):
            client_repo.update(conn, client_id, fields)
        return dict(client_repo.get_one(conn, client_id))


def delete_client(client_id: int) -> bool:
    """
    False if the client does not exist.
    Raises ConflictError while any renewal still references the client.
    """
    with store_errors(f"deleting client with id {client_id}"), get_conn() as conn:
        with transaction(conn):
            if client_repo.get_one(conn, client_id) is None:
                return False
            if renewal_repo.exists_for_client(conn, client_id):
                raise ConflictError(
                    "Cannot delete client with active renewals. Please delete related renewals first."
                )
            client_repo.delete(conn, client_id)
    return True
