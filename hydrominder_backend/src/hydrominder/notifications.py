"""
Local notification service boundary.

`NotificationCenter` is the contract the scheduler integrates against: request
authorization, add a request (replacing any pending one with the same
identifier), inspect pending requests, and deliver due notifications through
a delegate. `LocalNotificationCenter` is the in-process implementation used by
the application and the tests.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import RLock
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

logger = logging.getLogger(__name__)

# Authorization options
ALERT = "alert"
SOUND = "sound"
BADGE = "badge"

# Presentation options for notifications arriving while the app is in the foreground
LIST = "list"

AuthorizationCompletion = Callable[[bool, Optional[BaseException]], None]
AddCompletion = Callable[[Optional[BaseException]], None]


# PUBLIC_INTERFACE
class NotificationSchedulingError(Exception):
    """The notification center refused a request."""


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body: str
    sound: Optional[str] = "default"


@dataclass(frozen=True)
class CalendarTrigger:
    """
    Fires at a wall-clock hour and minute in local time.
    """
    hour: int
    minute: int
    repeats: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {self.minute}")

    def next_fire_date(self, after: datetime) -> datetime:
        """Return the first matching local datetime strictly after `after`."""
        candidate = after.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= after:
            candidate += timedelta(days=1)
        return candidate


@dataclass(frozen=True)
class NotificationRequest:
    identifier: str
    content: NotificationContent
    trigger: CalendarTrigger


@dataclass(frozen=True)
class PendingRequest:
    request: NotificationRequest
    fire_date: datetime


@dataclass(frozen=True)
class Notification:
    request: NotificationRequest
    date: datetime


@dataclass(frozen=True)
class NotificationResponse:
    notification: Notification
    action_identifier: str = "default"


@dataclass(frozen=True)
class Delivery:
    """A delivered notification and the options it was presented with."""
    notification: Notification
    options: FrozenSet[str] = field(default_factory=frozenset)


# PUBLIC_INTERFACE
class NotificationDelegate(ABC):
    """Callback handler bound to a notification center."""

    @abstractmethod
    def will_present(self, center: "NotificationCenter", notification: Notification) -> FrozenSet[str]:
        """Return presentation options for a notification arriving in the foreground."""

    @abstractmethod
    def did_receive(self, center: "NotificationCenter", response: NotificationResponse) -> None:
        """Handle the user's response to a delivered notification."""


class ForegroundPresentationDelegate(NotificationDelegate):
    """
    Keeps notifications visible while the app is in the foreground instead of
    letting the center suppress them.
    """

    options: FrozenSet[str] = frozenset({LIST, BADGE, SOUND})

    def will_present(self, center: "NotificationCenter", notification: Notification) -> FrozenSet[str]:
        return self.options

    def did_receive(self, center: "NotificationCenter", response: NotificationResponse) -> None:
        logger.info(
            "user responded to notification %s with %s",
            response.notification.request.identifier,
            response.action_identifier,
        )


# PUBLIC_INTERFACE
class NotificationCenter(ABC):
    """Abstract contract for a platform local-notification service."""

    def __init__(self) -> None:
        self._delegate: Optional[NotificationDelegate] = None

    @property
    def delegate(self) -> Optional[NotificationDelegate]:
        return self._delegate

    def set_delegate(self, delegate: Optional[NotificationDelegate]) -> None:
        self._delegate = delegate

    @abstractmethod
    def request_authorization(self, options: Iterable[str], completion: AuthorizationCompletion) -> None:
        """Ask the user for permission; report the answer through `completion(granted, error)`."""

    @abstractmethod
    def add(self, request: NotificationRequest, completion: Optional[AddCompletion] = None) -> None:
        """
        Schedule a request. A pending request with the same identifier is
        replaced. Errors are reported through `completion(error)`.
        """

    @abstractmethod
    def pending_requests(self) -> List[PendingRequest]:
        """Return pending requests ordered by fire date."""

    @abstractmethod
    def remove_pending(self, identifiers: Iterable[str]) -> None:
        """Drop pending requests with the given identifiers."""

    @abstractmethod
    def deliver_due(self, now: datetime) -> List[Delivery]:
        """Deliver every pending request whose fire date is not after `now`."""

    def respond(self, notification: Notification, action_identifier: str = "default") -> None:
        """Forward a user response to the delegate, if one is installed."""
        if self._delegate is not None:
            self._delegate.did_receive(self, NotificationResponse(notification, action_identifier))


class LocalNotificationCenter(NotificationCenter):
    """
    In-process notification center.

    Args:
        grant: Answer given to authorization requests.
        reject_requests: When True, every `add` fails with NotificationSchedulingError.
        clock: Source of the current local time used to compute fire dates.
    """

    def __init__(
        self,
        grant: bool = True,
        reject_requests: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        super().__init__()
        self._grant = grant
        self._reject_requests = reject_requests
        self._clock = clock or datetime.now
        self._lock = RLock()
        self._authorized: Optional[bool] = None
        self._pending: Dict[str, PendingRequest] = {}
        self._delivered: List[Delivery] = []

    @property
    def authorized(self) -> Optional[bool]:
        """None until authorization has been requested."""
        return self._authorized

    @property
    def delivered(self) -> List[Delivery]:
        with self._lock:
            return list(self._delivered)

    def request_authorization(self, options: Iterable[str], completion: AuthorizationCompletion) -> None:
        requested = sorted(set(options))
        with self._lock:
            self._authorized = self._grant
        logger.debug("authorization requested for %s: %s", requested, self._grant)
        completion(self._grant, None)

    def add(self, request: NotificationRequest, completion: Optional[AddCompletion] = None) -> None:
        error: Optional[BaseException] = None
        if self._reject_requests:
            error = NotificationSchedulingError(f"request {request.identifier!r} was rejected")
        elif not self._authorized:
            error = NotificationSchedulingError("notifications are not authorized")
        else:
            fire_date = request.trigger.next_fire_date(self._clock())
            with self._lock:
                self._pending[request.identifier] = PendingRequest(request=request, fire_date=fire_date)
        if completion is not None:
            completion(error)

    def pending_requests(self) -> List[PendingRequest]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda p: p.fire_date)

    def remove_pending(self, identifiers: Iterable[str]) -> None:
        with self._lock:
            for identifier in identifiers:
                self._pending.pop(identifier, None)

    def deliver_due(self, now: datetime) -> List[Delivery]:
        with self._lock:
            due = [p for p in self._pending.values() if p.fire_date <= now]
            for pending in due:
                trigger = pending.request.trigger
                if trigger.repeats:
                    self._pending[pending.request.identifier] = PendingRequest(
                        request=pending.request, fire_date=trigger.next_fire_date(now)
                    )
                else:
                    del self._pending[pending.request.identifier]

        deliveries: List[Delivery] = []
        for pending in sorted(due, key=lambda p: p.fire_date):
            notification = Notification(request=pending.request, date=pending.fire_date)
            # Without a delegate a foreground notification is delivered silently
            options = self._delegate.will_present(self, notification) if self._delegate else frozenset()
            deliveries.append(Delivery(notification=notification, options=frozenset(options)))
            logger.info("delivered notification %s", pending.request.identifier)

        with self._lock:
            self._delivered.extend(deliveries)
        return deliveries
