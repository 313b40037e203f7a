import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

# Ensure the default app imported anywhere in tests uses the memory backend
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from hydrominder.application import create_app  # noqa: E402
from hydrominder.notifications import LocalNotificationCenter  # noqa: E402
from hydrominder.settings import Settings  # noqa: E402


class FakeClock:
    """Callable clock returning a settable local time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now


def make_settings(**overrides) -> Settings:
    values = dict(
        persistence_backend="memory",
        sqlite_db_path="",
        cors_allow_origins=["*"],
        notifications_granted=True,
        locale="en",
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 4, 9, 8, 0, 0))


@pytest.fixture
def center(clock):
    return LocalNotificationCenter(grant=True, clock=clock)


@pytest.fixture
def app(clock, center):
    return create_app(make_settings(), center=center, clock=clock)


@pytest.fixture
def client(app):
    # Entering the client runs the startup sequence (authorization + scheduling)
    with TestClient(app) as c:
        yield c
