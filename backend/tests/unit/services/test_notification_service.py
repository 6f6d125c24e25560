from datetime import datetime
import json
from unittest.mock import MagicMock, Mock, patch

import pytest

from servicebooking.models import BookingStatus
from servicebooking.repositories.job_repository import JobRepository
from servicebooking.services import notification_service as notification_module
from servicebooking.services.notification_service import (
    BookingNotificationService,
    LoggingRealTimeNotifier,
    RedisRealTimeNotifier,
    build_realtime_notifier,
)
from tests.factories import (
    CUSTOMER_ID,
    PROVIDER_ID,
    add_weekly_hours,
    create_booking,
    create_service,
)

START = datetime(2030, 1, 8, 10, 0)


@pytest.fixture
def booking(unit_db):
    service = create_service(unit_db)
    add_weekly_hours(unit_db, service)
    return create_booking(unit_db, service, START)


@pytest.fixture
def push() -> Mock:
    return Mock()


@pytest.fixture
def notifications(unit_db, clock, push) -> BookingNotificationService:
    return BookingNotificationService(unit_db, clock=clock, realtime_notifier=push, enabled=True)


def _queued(unit_db):
    return JobRepository(unit_db).list_queued("event:")


class TestRecipients:
    def test_created_goes_to_provider(self, unit_db, notifications, push, booking) -> None:
        notifications.notify_booking_created(booking)

        jobs = _queued(unit_db)
        assert [job.type for job in jobs] == ["event:BookingCreated"]
        assert jobs[0].payload["provider_id"] == PROVIDER_ID
        assert jobs[0].payload["booking_start"] == START.isoformat()
        recipient, message = push.push.call_args.args
        assert recipient == PROVIDER_ID
        assert message["type"] == "booking_created"
        assert message["payload"]["booking_id"] == booking.id

    def test_confirmed_goes_to_customer(self, notifications, push, booking) -> None:
        notifications.notify_booking_confirmed(booking)

        assert push.push.call_args.args[0] == CUSTOMER_ID

    def test_declined_goes_to_customer(self, notifications, push, booking) -> None:
        notifications.notify_booking_declined(booking)

        assert push.push.call_args.args[0] == CUSTOMER_ID

    @pytest.mark.parametrize(
        "by_provider,recipient,cancelled_by",
        [(True, CUSTOMER_ID, "provider"), (False, PROVIDER_ID, "customer")],
    )
    def test_cancelled_goes_to_the_other_party(
        self, unit_db, notifications, push, booking, by_provider, recipient, cancelled_by
    ) -> None:
        notifications.notify_booking_cancelled(booking, cancelled_by_provider=by_provider)

        assert push.push.call_args.args[0] == recipient
        assert _queued(unit_db)[0].payload["cancelled_by"] == cancelled_by

    def test_rescheduled_goes_to_provider(self, unit_db, notifications, push, booking) -> None:
        notifications.notify_booking_rescheduled(booking, datetime(2030, 1, 8, 9, 0))

        assert push.push.call_args.args[0] == PROVIDER_ID
        payload = _queued(unit_db)[0].payload
        assert payload["old_start"] == "2030-01-08T09:00:00"
        assert payload["new_start"] == START.isoformat()


class TestBestEffort:
    def test_push_failure_is_swallowed(self, unit_db, notifications, push, booking) -> None:
        push.push.side_effect = ConnectionError("redis down")

        notifications.notify_booking_confirmed(booking)

        assert len(_queued(unit_db)) == 1

    def test_queue_failure_still_pushes(self, unit_db, clock, push, booking) -> None:
        publisher = Mock()
        publisher.publish.side_effect = RuntimeError("queue down")
        notifications = BookingNotificationService(
            unit_db, clock=clock, event_publisher=publisher, realtime_notifier=push, enabled=True
        )

        with patch.object(notifications.logger, "error") as log_error:
            notifications.notify_booking_created(booking)

        push.push.assert_called_once()
        log_error.assert_called_once()

    def test_disabled_sends_nothing(self, unit_db, clock, push, booking) -> None:
        notifications = BookingNotificationService(
            unit_db, clock=clock, realtime_notifier=push, enabled=False
        )

        notifications.notify_booking_created(booking)

        push.push.assert_not_called()
        assert _queued(unit_db) == []

    def test_booking_state_is_untouched(self, notifications, push, booking) -> None:
        push.push.side_effect = RuntimeError("boom")

        notifications.notify_booking_cancelled(booking, cancelled_by_provider=False)

        assert booking.status == BookingStatus.PENDING.value


class TestRealTimeNotifiers:
    def test_redis_notifier_publishes_json_on_user_channel(self) -> None:
        client = MagicMock()

        RedisRealTimeNotifier(client).push("u1", {"type": "booking_created"})

        channel, body = client.publish.call_args.args
        assert channel == "notifications:user:u1"
        assert json.loads(body) == {"type": "booking_created"}

    def test_logging_notifier_used_without_redis(self) -> None:
        with patch.object(notification_module, "get_sync_redis", return_value=None):
            assert isinstance(build_realtime_notifier(), LoggingRealTimeNotifier)

    def test_redis_notifier_used_with_redis(self) -> None:
        with patch.object(notification_module, "get_sync_redis", return_value=MagicMock()):
            assert isinstance(build_realtime_notifier(), RedisRealTimeNotifier)
