from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import FetchError, WriteError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def reading(action: str) -> Iterator[None]:
    """Translate connector errors raised while reading into FetchError."""
    try:
        yield
    except mysql.connector.Error as exc:
        raise FetchError(f"Could not {action}: {exc}", cause=exc) from exc


@contextmanager
def writing(action: str) -> Iterator[None]:
    """Translate connector errors raised while writing into WriteError."""
    try:
        yield
    except mysql.connector.Error as exc:
        raise WriteError(f"Could not {action}: {exc}", cause=exc) from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
