from __future__ import annotations

import html
import logging
from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from .models import ReminderEntity
from .repositories import ChangeEvent, Repository

logger = logging.getLogger(__name__)

STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "screen_title": "Drink Water",
        "sheet_title": "Add Notification",
        "sheet_label": "Time",
        "cancel": "Cancel",
        "save": "Save",
        "notification_title": "Time to drink water",
        "notification_body": "It's time to drink some water.",
        "am": "AM",
        "pm": "PM",
    },
    "ko": {
        "screen_title": "물마시기",
        "sheet_title": "알림 추가",
        "sheet_label": "시간",
        "cancel": "취소",
        "save": "저장",
        "notification_title": "물 마시자",
        "notification_body": "물 마실 시간입니다.",
        "am": "오전",
        "pm": "오후",
    },
}


def strings_for(locale: str) -> Dict[str, str]:
    """Return the string table for `locale`, falling back to English."""
    return STRINGS.get(locale, STRINGS["en"])


# PUBLIC_INTERFACE
def format_meridiem(ts: datetime, locale: str = "en") -> str:
    """Return the AM/PM marker for `ts` in the given locale."""
    table = strings_for(locale)
    return table["am"] if ts.hour < 12 else table["pm"]


# PUBLIC_INTERFACE
def format_time(ts: datetime) -> str:
    """Return `ts` as a zero-padded 12-hour 'hh:mm' string."""
    hour = ts.hour % 12 or 12
    return f"{hour:02d}:{ts.minute:02d}"


def render_row(reminder: ReminderEntity, locale: str = "en") -> Dict[str, Any]:
    return {
        "id": reminder["id"],
        "meridiem": format_meridiem(reminder["timestamp"], locale),
        "time": format_time(reminder["timestamp"]),
        "is_checked": reminder["is_checked"],
    }


class ReminderListScreen:
    """
    The single list screen, kept in sync with the store through its change feed.

    Rows are rebuilt from the store on every committed change; `revision`
    counts renders so clients can tell when the screen moved on.
    """

    def __init__(self, store: Repository, locale: str = "en") -> None:
        self._store = store
        self._locale = locale
        self._strings = strings_for(locale)
        self._lock = RLock()
        self._rows: List[Dict[str, Any]] = []
        self.revision = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.open()

    @property
    def rows(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._rows]

    def open(self) -> None:
        """Bind to the store's change feed and re-render; no-op while already bound."""
        with self._lock:
            if self._unsubscribe is not None:
                return
            self._unsubscribe = self._store.subscribe(self._on_change)
            self._refresh()

    def _refresh(self) -> None:
        # Snapshot and assignment happen under one lock
        with self._lock:
            self._rows = [render_row(r, self._locale) for r in self._store.list()]
            self.revision += 1

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("re-rendering list screen after %s of reminder %s", event.kind, event.reminder["id"])
        self._refresh()

    def render(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "title": self._strings["screen_title"],
                "add_sheet": {
                    "title": self._strings["sheet_title"],
                    "label": self._strings["sheet_label"],
                    "cancel": self._strings["cancel"],
                    "save": self._strings["save"],
                },
                "rows": [dict(r) for r in self._rows],
                "revision": self.revision,
            }

    def render_html(self) -> str:
        model = self.render()
        esc = html.escape
        items = "\n".join(
            '    <li data-id="{id}"><small>{meridiem}</small> <strong>{time}</strong> '
            '<input type="checkbox"{checked} disabled></li>'.format(
                id=row["id"],
                meridiem=esc(row["meridiem"]),
                time=esc(row["time"]),
                checked=" checked" if row["is_checked"] else "",
            )
            for row in model["rows"]
        )
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{esc(self._locale)}">\n'
            "<head><meta charset=\"utf-8\">"
            f"<title>{esc(model['title'])}</title></head>\n"
            "<body>\n"
            f"  <h1>{esc(model['title'])}</h1>\n"
            f"  <ul>\n{items}\n  </ul>\n"
            "</body>\n"
            "</html>\n"
        )

    def close(self) -> None:
        with self._lock:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
