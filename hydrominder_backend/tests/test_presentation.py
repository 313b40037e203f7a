import threading
from datetime import datetime

import pytest

from hydrominder.presentation import ReminderListScreen, format_meridiem, format_time
from hydrominder.repositories import InMemoryRepository


class _HeldListRepository(InMemoryRepository):
    """Blocks the first list() after `hold` is set, having already taken its snapshot."""

    def __init__(self, clock=None):
        super().__init__(clock)
        self.hold = None
        self.entered = threading.Event()

    def list(self):
        rows = super().list()
        hold, self.hold = self.hold, None
        if hold is not None:
            self.entered.set()
            hold.wait(timeout=5)
        return rows


@pytest.mark.parametrize(
    "ts,meridiem,text",
    [
        (datetime(2024, 4, 9, 0, 5), "AM", "12:05"),
        (datetime(2024, 4, 9, 8, 0), "AM", "08:00"),
        (datetime(2024, 4, 9, 12, 0), "PM", "12:00"),
        (datetime(2024, 4, 9, 19, 30), "PM", "07:30"),
    ],
)
def test_formatting(ts, meridiem, text):
    assert format_meridiem(ts) == meridiem
    assert format_time(ts) == text


def test_korean_meridiem():
    assert format_meridiem(datetime(2024, 4, 9, 8, 0), "ko") == "오전"
    assert format_meridiem(datetime(2024, 4, 9, 19, 0), "ko") == "오후"


def test_unknown_locale_falls_back_to_english():
    assert format_meridiem(datetime(2024, 4, 9, 8, 0), "fr") == "AM"


class TestReminderListScreen:
    def test_rows_track_store(self, clock):
        store = InMemoryRepository(clock=clock)
        screen = ReminderListScreen(store)
        assert screen.rows == []
        start = screen.revision

        clock.now = datetime(2024, 4, 9, 19, 30)
        late = store.create()
        clock.now = datetime(2024, 4, 9, 8, 0)
        early = store.create()
        store.set_checked(early["id"], True)

        assert screen.revision == start + 3
        assert screen.rows == [
            {"id": early["id"], "meridiem": "AM", "time": "08:00", "is_checked": True},
            {"id": late["id"], "meridiem": "PM", "time": "07:30", "is_checked": False},
        ]

        store.delete(late["id"])
        assert [r["id"] for r in screen.rows] == [early["id"]]

    def test_close_stops_rendering(self, clock):
        store = InMemoryRepository(clock=clock)
        screen = ReminderListScreen(store)
        screen.close()
        store.create()
        assert screen.rows == []

    def test_reopen_catches_up_and_resubscribes(self, clock):
        store = InMemoryRepository(clock=clock)
        screen = ReminderListScreen(store)
        screen.close()
        first = store.create()

        screen.open()
        screen.open()
        assert [r["id"] for r in screen.rows] == [first["id"]]

        second = store.create()
        assert [r["id"] for r in screen.rows] == [first["id"], second["id"]]
        screen.close()
        screen.close()

    def test_overlapping_refreshes_keep_newest_rows(self, clock):
        store = _HeldListRepository(clock=clock)
        screen = ReminderListScreen(store)

        release = threading.Event()
        store.hold = release
        slow = threading.Thread(target=store.create)
        slow.start()
        assert store.entered.wait(timeout=5)

        clock.now = datetime(2024, 4, 9, 9, 0)
        fast = threading.Thread(target=store.create)
        fast.start()
        fast.join(timeout=0.2)

        release.set()
        slow.join(timeout=5)
        fast.join(timeout=5)

        assert len(store.list()) == 2
        assert [r["time"] for r in screen.rows] == ["08:00", "09:00"]

    def test_render_html_escapes_and_marks_checked(self, clock):
        store = InMemoryRepository(clock=clock)
        screen = ReminderListScreen(store, locale="ko")
        r = store.create()
        store.set_checked(r["id"], True)

        page = screen.render_html()

        assert '<html lang="ko">' in page
        assert "<h1>물마시기</h1>" in page
        assert "<small>오전</small> <strong>08:00</strong>" in page
        assert " checked disabled" in page
