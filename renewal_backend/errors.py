from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for everything the services raise."""


class StoreError(StorageError):
    """The underlying store failed; the operation did not complete."""

    def __init__(self, action: str, cause: Exception):
        super().__init__(f"{action}: {cause}")
        self.action = action
        self.cause = cause


class ConflictError(StorageError, ValueError):
    """A domain rule forbids the operation (e.g. deleting a referenced client)."""


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Log driver failures and re-raise them as StoreError."""
    try:
        yield
    except sqlite3.Error as e:
        logger.error(f"Error {action}: {e}")
        raise StoreError(action, e) from e
