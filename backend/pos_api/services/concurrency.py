# Overview: Service-layer helpers for transactional scope, row locking and retry.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class StorageError(RuntimeError):
    """The backing store failed (connectivity, lock timeout, constraint). Server-side fault."""


def begin_write() -> None:
    """
    Open the session's transaction as a writer.

    SQLite has no row locks, so the whole database write lock is taken up front
    (BEGIN IMMEDIATE). Other dialects rely on lock_for_update() per row.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must be safe to replay from scratch.
    """
    attempts = max(attempts, 1)
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
