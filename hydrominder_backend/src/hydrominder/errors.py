from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class CommitError(RuntimeError):
    """
    Raised when a store mutation could not be committed.

    The attempted mutation has been rolled back: neither the durable store nor
    any subscribed view reflects it.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"failed to commit {operation}{detail}")
