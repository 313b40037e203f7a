from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ReminderEntity
from .notifications import PendingRequest
from .presentation import format_meridiem, format_time


# PUBLIC_INTERFACE
class ReminderUpdate(BaseModel):
    """
    Schema for toggling a reminder's checked state.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"is_checked": True}},
    )

    is_checked: bool = Field(..., description="New checked state of the reminder")


# PUBLIC_INTERFACE
class ReminderOut(BaseModel):
    """
    Schema returned by the API for a reminder, including its display labels.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "timestamp": "2024-04-09T19:30:00",
                "is_checked": False,
                "meridiem": "PM",
                "time": "07:30",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the reminder")
    timestamp: datetime = Field(..., description="Creation time (local)")
    is_checked: bool = Field(..., description="Checked/unchecked toggle state")
    meridiem: str = Field(..., description="AM/PM marker for the timestamp")
    time: str = Field(..., description="12-hour hh:mm rendering of the timestamp")

    @classmethod
    def from_entity(cls, entity: ReminderEntity, locale: str = "en") -> "ReminderOut":
        return cls(
            id=entity["id"],
            timestamp=entity["timestamp"],
            is_checked=entity["is_checked"],
            meridiem=format_meridiem(entity["timestamp"], locale),
            time=format_time(entity["timestamp"]),
        )


class ReminderList(BaseModel):
    """
    Envelope for the reminder list, sorted ascending by timestamp.
    """
    items: List[ReminderOut] = Field(..., description="Reminders in timestamp order")
    total: int = Field(..., description="Number of reminders")


class ScreenRow(BaseModel):
    id: int
    meridiem: str
    time: str
    is_checked: bool


class AddSheet(BaseModel):
    title: str
    label: str
    cancel: str
    save: str


# PUBLIC_INTERFACE
class ScreenOut(BaseModel):
    """
    View model of the list screen.
    """
    title: str = Field(..., description="Navigation title of the list screen")
    add_sheet: AddSheet = Field(..., description="Labels of the add sheet opened by the plus button")
    rows: List[ScreenRow] = Field(..., description="One row per reminder in list order")
    revision: int = Field(..., description="Incremented each time the screen re-renders")


class NotificationRequestOut(BaseModel):
    identifier: str
    title: str
    body: str
    sound: Optional[str] = None
    hour: int
    minute: int
    repeats: bool
    fire_date: datetime

    @classmethod
    def from_pending(cls, pending: PendingRequest) -> "NotificationRequestOut":
        request = pending.request
        return cls(
            identifier=request.identifier,
            title=request.content.title,
            body=request.content.body,
            sound=request.content.sound,
            hour=request.trigger.hour,
            minute=request.trigger.minute,
            repeats=request.trigger.repeats,
            fire_date=pending.fire_date,
        )


# PUBLIC_INTERFACE
class NotificationStatusOut(BaseModel):
    """
    Scheduler state and the center's pending requests.
    """
    state: str = Field(..., description="'authorized' or 'unauthorized'")
    last_error: Optional[str] = Field(default=None, description="Last scheduling error, if any")
    pending: List[NotificationRequestOut] = Field(..., description="Pending notification requests")
