from __future__ import annotations

import enum
import logging
from typing import Optional

from .notifications import (
    ALERT,
    BADGE,
    SOUND,
    CalendarTrigger,
    NotificationCenter,
    NotificationContent,
    NotificationDelegate,
    NotificationRequest,
)
from .presentation import strings_for

logger = logging.getLogger(__name__)

REMINDER_IDENTIFIER = "UniqueIdentifier"
REMINDER_HOUR = 19
REMINDER_MINUTE = 7


class SchedulerState(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    AUTHORIZED = "authorized"


# PUBLIC_INTERFACE
def build_water_reminder(locale: str = "en") -> NotificationRequest:
    """Return the fixed 19:07 drink-water request in the given locale."""
    strings = strings_for(locale)
    return NotificationRequest(
        identifier=REMINDER_IDENTIFIER,
        content=NotificationContent(
            title=strings["notification_title"],
            body=strings["notification_body"],
            sound="default",
        ),
        # One-shot: the observed configuration does not repeat daily
        trigger=CalendarTrigger(hour=REMINDER_HOUR, minute=REMINDER_MINUTE, repeats=False),
    )


class NotificationScheduler:
    """
    Requests notification permission and schedules the drink-water reminder.

    The center and delegate are injected by the composition root. Outcomes of
    the asynchronous center callbacks are logged and reflected in `state` and
    `last_error`; nothing else waits on them.
    """

    def __init__(self, center: NotificationCenter, delegate: NotificationDelegate, locale: str = "en") -> None:
        self._center = center
        self._delegate = delegate
        self._locale = locale
        self.state = SchedulerState.UNAUTHORIZED
        self.last_error: Optional[BaseException] = None

    @property
    def center(self) -> NotificationCenter:
        return self._center

    def start(self) -> None:
        """Request alert/sound/badge authorization; schedule the reminder once granted."""
        self._center.request_authorization({ALERT, SOUND, BADGE}, self._on_authorization)

    def _on_authorization(self, granted: bool, error: Optional[BaseException]) -> None:
        if error is not None:
            logger.error("notification authorization failed: %s", error)
        if not granted:
            logger.info("notifications denied; the drink-water reminder will not be scheduled")
            return
        logger.info("notifications granted")
        self._center.set_delegate(self._delegate)
        self.state = SchedulerState.AUTHORIZED
        self.schedule()

    def schedule(self) -> None:
        """Register the fixed request, replacing any pending one with the same identifier."""
        request = build_water_reminder(self._locale)
        self._center.add(request, self._on_scheduled)

    def _on_scheduled(self, error: Optional[BaseException]) -> None:
        if error is not None:
            self.last_error = error
            logger.error("failed to schedule notification %s: %s", REMINDER_IDENTIFIER, error)
            return
        self.last_error = None
        logger.info(
            "scheduled notification %s at %02d:%02d", REMINDER_IDENTIFIER, REMINDER_HOUR, REMINDER_MINUTE
        )
