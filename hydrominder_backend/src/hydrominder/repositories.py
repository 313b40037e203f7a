from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Callable, List, Optional

from .models import ReminderEntity
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """
    A committed store mutation, delivered to subscribers.
    """
    kind: str  # one of: created, updated, deleted
    reminder: ReminderEntity


Listener = Callable[[ChangeEvent], None]


def sort_key(reminder: ReminderEntity):
    """Ascending by timestamp; id breaks ties between equal timestamps."""
    return reminder["timestamp"], reminder["id"]


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for reminder storage backends.

    Every mutation is committed before it returns. Subscribers are notified
    only after a successful commit, so a failed mutation is never observed.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or datetime.now
        self._listeners: List[Listener] = []
        self._listeners_lock = RLock()

    @abstractmethod
    def list(self) -> List[ReminderEntity]:
        """Return all reminders sorted ascending by timestamp."""

    @abstractmethod
    def get(self, reminder_id: int) -> Optional[ReminderEntity]:
        """Return a ReminderEntity by id, or None if not found."""

    @abstractmethod
    def create(self) -> ReminderEntity:
        """Create, commit and return a new unchecked reminder stamped with the current time."""

    @abstractmethod
    def set_checked(self, reminder_id: int, value: bool) -> Optional[ReminderEntity]:
        """Set the checked flag and commit. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, reminder_id: int) -> bool:
        """Delete a reminder by id and commit. Return True if deleted, False if not found."""

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for committed changes.

        Returns a callable that removes the listener again.
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, kind: str, reminder: ReminderEntity) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(ChangeEvent(kind=kind, reminder=reminder.copy()))  # type: ignore[arg-type]
            except Exception:
                # The change is already committed; one broken view must not hide it from the others
                logger.exception("change listener %r failed on %s event", listener, kind)


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and ephemeral runs.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._lock = RLock()
        self._items: dict[int, ReminderEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def list(self) -> List[ReminderEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [r.copy() for r in sorted(self._items.values(), key=sort_key)]  # type: ignore[misc]

    def get(self, reminder_id: int) -> Optional[ReminderEntity]:
        with self._lock:
            item = self._items.get(reminder_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def create(self) -> ReminderEntity:
        entity: ReminderEntity = {
            "id": self._allocate_id(),
            "timestamp": self._clock(),
            "is_checked": False,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        self._emit(CREATED, entity)
        return entity.copy()  # type: ignore[return-value]

    def set_checked(self, reminder_id: int, value: bool) -> Optional[ReminderEntity]:
        with self._lock:
            existing = self._items.get(reminder_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated["is_checked"] = bool(value)
            self._items[reminder_id] = updated  # type: ignore[assignment]
        self._emit(UPDATED, updated)  # type: ignore[arg-type]
        return updated.copy()  # type: ignore[return-value]

    def delete(self, reminder_id: int) -> bool:
        with self._lock:
            removed = self._items.pop(reminder_id, None)
        if removed is None:
            return False
        self._emit(DELETED, removed)
        return True


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository (durable across restarts)
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path, clock=clock)
    logger.info("using in-memory reminder store; reminders will not survive a restart")
    return InMemoryRepository(clock=clock)
