# Overview: Locking helpers for the stock-consuming critical section.

from __future__ import annotations

from sqlalchemy import text

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, see begin_write_transaction.
    """
    return query.with_for_update()


def is_sqlite() -> bool:
    return db.engine.dialect.name == "sqlite"


def begin_write_transaction() -> None:
    """
    Take the database write lock before the first read of a transaction.

    SQLite has no row locks, so the whole unit runs under BEGIN IMMEDIATE:
    a concurrent writer blocks (busy timeout) until we commit or roll back,
    then reads the committed stock. Other databases rely on lock_for_update.
    """
    if is_sqlite():
        db.session.execute(text("BEGIN IMMEDIATE"))
