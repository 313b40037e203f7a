from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..presentation import ReminderListScreen
from ..scheduler import NotificationScheduler
from ..schemas import NotificationRequestOut, NotificationStatusOut, ScreenOut

router = APIRouter(tags=["screen"])


def _get_screen(request: Request) -> ReminderListScreen:
    return request.app.state.screen


def _get_scheduler(request: Request) -> NotificationScheduler:
    return request.app.state.scheduler


# PUBLIC_INTERFACE
@router.get(
    "/api/v1/screen",
    response_model=ScreenOut,
    summary="List Screen",
    description="View model of the list screen, re-rendered on every reminder change.",
)
def get_screen(screen: ReminderListScreen = Depends(_get_screen)) -> ScreenOut:
    """
    Return the current rendering of the list screen.
    """
    return ScreenOut(**screen.render())


# PUBLIC_INTERFACE
@router.get("/ui", response_class=HTMLResponse, summary="List Screen (HTML)")
def get_screen_html(screen: ReminderListScreen = Depends(_get_screen)) -> HTMLResponse:
    """
    Return the list screen as a minimal HTML page.
    """
    return HTMLResponse(screen.render_html())


# PUBLIC_INTERFACE
@router.get(
    "/api/v1/notifications/",
    response_model=NotificationStatusOut,
    tags=["notifications"],
    summary="Notification Status",
    description="Scheduler state and pending notification requests.",
)
def get_notifications(scheduler: NotificationScheduler = Depends(_get_scheduler)) -> NotificationStatusOut:
    """
    Report whether notifications are authorized and what is pending.
    """
    return NotificationStatusOut(
        state=scheduler.state.value,
        last_error=str(scheduler.last_error) if scheduler.last_error else None,
        pending=[NotificationRequestOut.from_pending(p) for p in scheduler.center.pending_requests()],
    )
