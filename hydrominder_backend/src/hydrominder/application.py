from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import CommitError
from .notifications import ForegroundPresentationDelegate, LocalNotificationCenter, NotificationCenter
from .presentation import ReminderListScreen
from .repositories import Clock, Repository, get_repository
from .routers import reminders as reminders_router
from .routers import screen as screen_router
from .scheduler import NotificationScheduler
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "reminders", "description": "Create, list, toggle and delete drink-water reminders."},
    {"name": "screen", "description": "Rendered list screen bound to the reminder store."},
    {"name": "notifications", "description": "State of the daily drink-water notification."},
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Repository] = None,
    center: Optional[NotificationCenter] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Composition root: build the store, notification center, scheduler and list
    screen once, and expose them on `app.state`.

    Authorization and scheduling run at startup (lifespan); their outcome never
    blocks the reminder API.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = store or get_repository(settings, clock=clock)
    center = center or LocalNotificationCenter(grant=settings.notifications_granted)
    scheduler = NotificationScheduler(center, ForegroundPresentationDelegate(), locale=settings.locale)
    screen = ReminderListScreen(store, locale=settings.locale)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Paired with close() so a restarted lifespan re-binds the screen
        screen.open()
        scheduler.start()
        yield
        screen.close()

    app = FastAPI(
        title="HydroMinder Backend",
        description="Drink-water reminder list with a daily local notification.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.center = center
    app.state.scheduler = scheduler
    app.state.screen = screen

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": exc.errors(),
            },
        )

    @app.exception_handler(CommitError)
    async def commit_error_handler(request: Request, exc: CommitError) -> JSONResponse:
        """
        Report a rolled-back store mutation instead of terminating the process.
        """
        logger.error("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "CommitError",
                "message": str(exc),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health, the storage backend and
            the notification scheduler state.
        """
        return {
            "message": "Healthy",
            "backend": settings.persistence_backend,
            "notifications": scheduler.state.value,
        }

    app.include_router(reminders_router.router)
    app.include_router(screen_router.router)

    logger.info("HydroMinder backend ready (backend=%s, locale=%s)", settings.persistence_backend, settings.locale)
    return app
