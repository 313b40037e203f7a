import logging
from datetime import datetime

import pytest

from hydrominder.notifications import (
    BADGE,
    LIST,
    SOUND,
    CalendarTrigger,
    ForegroundPresentationDelegate,
    LocalNotificationCenter,
    NotificationContent,
    NotificationRequest,
    NotificationSchedulingError,
)
from hydrominder.repositories import InMemoryRepository
from hydrominder.scheduler import (
    REMINDER_IDENTIFIER,
    NotificationScheduler,
    SchedulerState,
    build_water_reminder,
)


def make_scheduler(center, locale="en"):
    return NotificationScheduler(center, ForegroundPresentationDelegate(), locale=locale)


class TestCalendarTrigger:
    def test_later_today(self):
        trigger = CalendarTrigger(hour=19, minute=7)
        assert trigger.next_fire_date(datetime(2024, 4, 9, 8, 0)) == datetime(2024, 4, 9, 19, 7)

    def test_rolls_over_to_tomorrow(self):
        trigger = CalendarTrigger(hour=19, minute=7)
        assert trigger.next_fire_date(datetime(2024, 4, 9, 19, 7)) == datetime(2024, 4, 10, 19, 7)
        assert trigger.next_fire_date(datetime(2024, 4, 30, 22, 0)) == datetime(2024, 5, 1, 19, 7)

    @pytest.mark.parametrize("hour,minute", [(24, 0), (-1, 0), (12, 60)])
    def test_rejects_invalid_time(self, hour, minute):
        with pytest.raises(ValueError):
            CalendarTrigger(hour=hour, minute=minute)


class TestLocalNotificationCenter:
    def _request(self, identifier="id", hour=19, minute=7, repeats=False):
        return NotificationRequest(
            identifier=identifier,
            content=NotificationContent(title="t", body="b"),
            trigger=CalendarTrigger(hour=hour, minute=minute, repeats=repeats),
        )

    def test_add_replaces_same_identifier(self, clock):
        center = LocalNotificationCenter(clock=clock)
        center.request_authorization({"alert"}, lambda granted, error: None)
        center.add(self._request(minute=7))
        center.add(self._request(minute=30))
        [pending] = center.pending_requests()
        assert pending.request.trigger.minute == 30

    def test_add_before_authorization_fails(self, clock):
        center = LocalNotificationCenter(clock=clock)
        errors = []
        center.add(self._request(), errors.append)
        assert isinstance(errors[0], NotificationSchedulingError)
        assert center.pending_requests() == []

    def test_deliver_due_uses_delegate_and_drops_one_shot(self, clock):
        center = LocalNotificationCenter(clock=clock)
        center.request_authorization({"alert"}, lambda granted, error: None)
        center.set_delegate(ForegroundPresentationDelegate())
        center.add(self._request("once"))
        center.add(self._request("daily", repeats=True))

        assert center.deliver_due(datetime(2024, 4, 9, 19, 6)) == []

        deliveries = center.deliver_due(datetime(2024, 4, 9, 19, 8))
        assert {d.notification.request.identifier for d in deliveries} == {"once", "daily"}
        assert all(d.options == frozenset({LIST, BADGE, SOUND}) for d in deliveries)

        [remaining] = center.pending_requests()
        assert remaining.request.identifier == "daily"
        assert remaining.fire_date == datetime(2024, 4, 10, 19, 7)
        assert len(center.delivered) == 2

    def test_deliver_without_delegate_is_silent(self, clock):
        center = LocalNotificationCenter(clock=clock)
        center.request_authorization({"alert"}, lambda granted, error: None)
        center.add(self._request())
        [delivery] = center.deliver_due(datetime(2024, 4, 9, 20, 0))
        assert delivery.options == frozenset()

    def test_remove_pending(self, clock):
        center = LocalNotificationCenter(clock=clock)
        center.request_authorization({"alert"}, lambda granted, error: None)
        center.add(self._request("a"))
        center.add(self._request("b"))
        center.remove_pending(["a", "missing"])
        assert [p.request.identifier for p in center.pending_requests()] == ["b"]


class TestNotificationScheduler:
    def test_granted_schedules_fixed_request(self, clock):
        center = LocalNotificationCenter(grant=True, clock=clock)
        scheduler = make_scheduler(center)

        scheduler.start()

        assert scheduler.state is SchedulerState.AUTHORIZED
        assert isinstance(center.delegate, ForegroundPresentationDelegate)
        [pending] = center.pending_requests()
        assert pending.request == build_water_reminder("en")
        assert pending.request.identifier == REMINDER_IDENTIFIER
        assert pending.request.trigger == CalendarTrigger(hour=19, minute=7, repeats=False)
        assert pending.request.content.sound == "default"
        assert pending.fire_date == datetime(2024, 4, 9, 19, 7)

    def test_starting_twice_keeps_one_pending_request(self, clock):
        center = LocalNotificationCenter(grant=True, clock=clock)
        make_scheduler(center).start()
        make_scheduler(center).start()
        assert [p.request.identifier for p in center.pending_requests()] == [REMINDER_IDENTIFIER]

    def test_denied_schedules_nothing(self, clock):
        center = LocalNotificationCenter(grant=False, clock=clock)
        scheduler = make_scheduler(center)

        scheduler.start()

        assert scheduler.state is SchedulerState.UNAUTHORIZED
        assert center.delegate is None
        assert center.pending_requests() == []

    def test_denied_does_not_affect_store(self, clock):
        make_scheduler(LocalNotificationCenter(grant=False, clock=clock)).start()
        store = InMemoryRepository(clock=clock)
        r = store.create()
        assert store.set_checked(r["id"], True)["is_checked"] is True
        assert store.delete(r["id"]) is True

    def test_scheduling_error_is_not_fatal(self, clock, caplog):
        center = LocalNotificationCenter(grant=True, reject_requests=True, clock=clock)
        scheduler = make_scheduler(center)

        scheduler.start()

        assert scheduler.state is SchedulerState.AUTHORIZED
        assert isinstance(scheduler.last_error, NotificationSchedulingError)
        assert center.pending_requests() == []
        assert "failed to schedule notification" in caplog.text

    def test_delivered_reminder_is_presented_in_foreground(self, clock):
        center = LocalNotificationCenter(grant=True, clock=clock)
        make_scheduler(center).start()

        [delivery] = center.deliver_due(datetime(2024, 4, 9, 19, 7))

        assert delivery.options == frozenset({LIST, BADGE, SOUND})
        assert delivery.notification.request.content.title == "Time to drink water"
        assert center.pending_requests() == []


class TestNotificationResponses:
    def test_response_reaches_delegate(self, clock, caplog):
        caplog.set_level(logging.INFO, logger="hydrominder.notifications")
        center = LocalNotificationCenter(grant=True, clock=clock)
        make_scheduler(center).start()
        [delivery] = center.deliver_due(datetime(2024, 4, 9, 19, 7))

        center.respond(delivery.notification, "open")

        assert "user responded to notification UniqueIdentifier with open" in caplog.text

    def test_delegate_receives_response_object(self, clock):
        received = []

        class RecordingDelegate(ForegroundPresentationDelegate):
            def did_receive(self, center, response):
                received.append(response)

        center = LocalNotificationCenter(grant=True, clock=clock)
        NotificationScheduler(center, RecordingDelegate()).start()
        [delivery] = center.deliver_due(datetime(2024, 4, 9, 19, 7))

        center.respond(delivery.notification)

        [response] = received
        assert response.notification is delivery.notification
        assert response.action_identifier == "default"

    def test_response_without_delegate_is_ignored(self, clock, caplog):
        caplog.set_level(logging.INFO, logger="hydrominder.notifications")
        center = LocalNotificationCenter(grant=True, clock=clock)
        center.request_authorization({"alert"}, lambda granted, error: None)
        center.add(build_water_reminder())
        [delivery] = center.deliver_due(datetime(2024, 4, 9, 19, 7))
        caplog.clear()

        center.respond(delivery.notification, "open")

        assert center.delegate is None
        assert "user responded" not in caplog.text
