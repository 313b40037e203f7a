from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class ReminderEntity(TypedDict):
    """
    A lightweight domain model representing a reminder entry.

    Fields:
    - id: Unique integer identifier assigned by the store
    - timestamp: Local creation time; never changed after creation
    - is_checked: Boolean completion flag toggled by the user
    """

    id: int
    timestamp: datetime
    is_checked: bool
