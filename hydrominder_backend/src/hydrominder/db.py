from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import CommitError
from .models import ReminderEntity
from .repositories import CREATED, DELETED, UPDATED, Clock, Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "reminders"
    id: str = "id"
    timestamp: str = "timestamp"
    is_checked: str = "is_checked"


_COLS = _Cols()


def _format_ts(value: datetime) -> str:
    # Fixed width keeps lexical order equal to chronological order
    return value.isoformat(timespec="microseconds")


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Each mutation runs in its own transaction; on failure the transaction is
    rolled back and CommitError is raised before any subscriber is notified.
    """

    def __init__(self, db_path: str, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("reminder store opened: sqlite:///%s", db_path)

    @property
    def db_path(self) -> str:
        return self._db_path

    def _commit(self, conn: sqlite3.Connection) -> None:
        conn.commit()

    @contextmanager
    def _conn(self, operation: Optional[str] = None) -> Generator[sqlite3.Connection, None, None]:
        """
        Open a connection for one unit of work.

        When `operation` is given the unit is a mutation: storage errors are
        rolled back and re-raised as CommitError naming the operation.
        """
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            self._commit(conn)
        except sqlite3.Error as exc:
            conn.rollback()
            if operation is None:
                raise
            logger.exception("commit of %s failed; rolled back", operation)
            raise CommitError(operation, exc) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.timestamp} TEXT NOT NULL,
                    {_COLS.is_checked} INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_timestamp ON {_COLS.table}({_COLS.timestamp})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> ReminderEntity:
        return {
            "id": int(row[_COLS.id]),
            "timestamp": datetime.fromisoformat(row[_COLS.timestamp]),
            "is_checked": bool(row[_COLS.is_checked]),
        }

    def _select(self, conn: sqlite3.Connection, reminder_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (reminder_id,)).fetchone()

    def list(self) -> List[ReminderEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.timestamp} ASC, {_COLS.id} ASC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def get(self, reminder_id: int) -> Optional[ReminderEntity]:
        with self._conn() as conn:
            row = self._select(conn, reminder_id)
            return self._row_to_entity(row) if row else None

    def create(self) -> ReminderEntity:
        now = _format_ts(self._clock())
        with self._conn("create") as conn:
            cur = conn.execute(
                f"INSERT INTO {_COLS.table} ({_COLS.timestamp}, {_COLS.is_checked}) VALUES (?, 0)",
                (now,),
            )
            new_id = int(cur.lastrowid)
            row = self._select(conn, new_id)
            if row is None:
                raise sqlite3.DatabaseError(f"reminder {new_id} vanished before commit")
            created = self._row_to_entity(row)
        self._emit(CREATED, created)
        return created

    def set_checked(self, reminder_id: int, value: bool) -> Optional[ReminderEntity]:
        with self._conn("set_checked") as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.is_checked} = ? WHERE {_COLS.id} = ?",
                (1 if value else 0, reminder_id),
            )
            if cur.rowcount == 0:
                return None
            row = self._select(conn, reminder_id)
            if row is None:
                raise sqlite3.DatabaseError(f"reminder {reminder_id} vanished before commit")
            updated = self._row_to_entity(row)
        self._emit(UPDATED, updated)
        return updated

    def delete(self, reminder_id: int) -> bool:
        with self._conn("delete") as conn:
            row = self._select(conn, reminder_id)
            if row is None:
                return False
            removed = self._row_to_entity(row)
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (reminder_id,))
        self._emit(DELETED, removed)
        return True
