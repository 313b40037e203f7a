from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..repositories import Repository
from ..schemas import ReminderList, ReminderOut, ReminderUpdate

router = APIRouter(
    prefix="/api/v1/reminders",
    tags=["reminders"],
)


def _get_repo(request: Request) -> Repository:
    """
    Dependency returning the store built by the application factory.
    """
    return request.app.state.store


def _get_locale(request: Request) -> str:
    return request.app.state.settings.locale


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=ReminderList,
    summary="List Reminders",
    description="List all reminders sorted ascending by timestamp.",
    responses={200: {"description": "List retrieved successfully"}},
)
def list_reminders(
    repo: Repository = Depends(_get_repo),
    locale: str = Depends(_get_locale),
) -> ReminderList:
    """
    List reminders in timestamp order.
    """
    items = [ReminderOut.from_entity(r, locale) for r in repo.list()]
    return ReminderList(items=items, total=len(items))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ReminderOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Reminder",
    description="Save action of the add sheet: record an unchecked reminder stamped with the current time.",
    responses={
        201: {"description": "Reminder created successfully"},
        500: {"description": "Reminder could not be committed"},
    },
)
def create_reminder(
    repo: Repository = Depends(_get_repo),
    locale: str = Depends(_get_locale),
) -> ReminderOut:
    """
    Create a new reminder.
    """
    return ReminderOut.from_entity(repo.create(), locale)


# PUBLIC_INTERFACE
@router.get(
    "/{reminder_id}",
    response_model=ReminderOut,
    summary="Get Reminder",
    description="Get a single reminder by ID.",
    responses={
        200: {"description": "Reminder found"},
        404: {"description": "Reminder not found"},
    },
)
def get_reminder(
    reminder_id: int,
    repo: Repository = Depends(_get_repo),
    locale: str = Depends(_get_locale),
) -> ReminderOut:
    """
    Retrieve a single reminder by its ID.
    """
    item = repo.get(reminder_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return ReminderOut.from_entity(item, locale)


# PUBLIC_INTERFACE
@router.patch(
    "/{reminder_id}",
    response_model=ReminderOut,
    summary="Toggle Reminder",
    description="Set the checked state of a reminder.",
    responses={
        200: {"description": "Reminder updated"},
        404: {"description": "Reminder not found"},
        500: {"description": "Reminder could not be committed"},
    },
)
def patch_reminder(
    reminder_id: int,
    payload: ReminderUpdate,
    repo: Repository = Depends(_get_repo),
    locale: str = Depends(_get_locale),
) -> ReminderOut:
    """
    Update the checked flag of a reminder.
    """
    updated = repo.set_checked(reminder_id, payload.is_checked)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return ReminderOut.from_entity(updated, locale)


# PUBLIC_INTERFACE
@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Reminder",
    description="Swipe-to-delete: remove a reminder by ID.",
    responses={
        204: {"description": "Reminder deleted"},
        404: {"description": "Reminder not found"},
        500: {"description": "Reminder could not be committed"},
    },
)
def delete_reminder(reminder_id: int, repo: Repository = Depends(_get_repo)) -> None:
    """
    Delete a reminder. Returns 204 on success, 404 if not found.
    """
    ok = repo.delete(reminder_id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return None
