from datetime import datetime, time

from servicebooking.models import BookingStatus
from servicebooking.repositories import RepositoryFactory
from tests.factories import (
    CUSTOMER_ID,
    OTHER_CUSTOMER_ID,
    PROVIDER_ID,
    add_weekly_hours,
    create_booking,
    create_service,
)

DAY = datetime(2030, 1, 8)


def _at(hour: int) -> datetime:
    return datetime.combine(DAY.date(), time(hour, 0))


class TestActiveBookingsInRange:
    def test_only_active_bookings_inside_the_window(self, unit_db) -> None:
        service = create_service(unit_db)
        pending = create_booking(unit_db, service, _at(9))
        confirmed = create_booking(unit_db, service, _at(10), status=BookingStatus.CONFIRMED)
        create_booking(unit_db, service, _at(11), status=BookingStatus.CANCELLED)
        create_booking(unit_db, service, _at(12), status=BookingStatus.DECLINED)
        create_booking(unit_db, service, _at(14))

        found = RepositoryFactory.create_booking_repository(unit_db).get_active_bookings_in_range(
            service.id, _at(9), _at(14)
        )

        assert [booking.id for booking in found] == [pending.id, confirmed.id]

    def test_excludes_the_given_booking(self, unit_db) -> None:
        service = create_service(unit_db)
        moving = create_booking(unit_db, service, _at(9))
        other = create_booking(unit_db, service, _at(10))

        found = RepositoryFactory.create_booking_repository(unit_db).get_active_bookings_in_range(
            service.id, _at(0), _at(23), exclude_booking_id=moving.id
        )

        assert [booking.id for booking in found] == [other.id]

    def test_other_services_are_ignored(self, unit_db) -> None:
        service = create_service(unit_db)
        other_service = create_service(unit_db, name="Shave")
        create_booking(unit_db, other_service, _at(9))

        found = RepositoryFactory.create_booking_repository(unit_db).get_active_bookings_in_range(
            service.id, _at(0), _at(23)
        )

        assert found == []


class TestListings:
    def test_customer_bookings_newest_first(self, unit_db) -> None:
        service = create_service(unit_db)
        early = create_booking(unit_db, service, _at(9))
        late = create_booking(unit_db, service, _at(15))
        create_booking(unit_db, service, _at(11), customer_id=OTHER_CUSTOMER_ID)

        found = RepositoryFactory.create_booking_repository(unit_db).get_customer_bookings(
            CUSTOMER_ID
        )

        assert [booking.id for booking in found] == [late.id, early.id]

    def test_provider_bookings_filtered_by_customer(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service)
        mine = create_booking(unit_db, service, _at(9))
        create_booking(unit_db, service, _at(10), customer_id=OTHER_CUSTOMER_ID)
        repository = RepositoryFactory.create_booking_repository(unit_db)

        assert len(repository.get_provider_bookings(PROVIDER_ID)) == 2
        assert [b.id for b in repository.get_provider_bookings(PROVIDER_ID, CUSTOMER_ID)] == [
            mine.id
        ]
        assert repository.get_provider_bookings("someone-else") == []

    def test_has_completed_booking(self, unit_db) -> None:
        service = create_service(unit_db)
        create_booking(unit_db, service, _at(9), status=BookingStatus.CONFIRMED)
        repository = RepositoryFactory.create_booking_repository(unit_db)

        assert not repository.has_completed_booking(CUSTOMER_ID, service.id)

        create_booking(unit_db, service, _at(10), status=BookingStatus.COMPLETED)

        assert repository.has_completed_booking(CUSTOMER_ID, service.id)

    def test_get_booking_for_update(self, unit_db) -> None:
        service = create_service(unit_db)
        booking = create_booking(unit_db, service, _at(9))
        repository = RepositoryFactory.create_booking_repository(unit_db)

        assert repository.get_booking_for_update(booking.id).id == booking.id
        assert repository.get_booking_for_update("missing") is None


class TestBaseOperations:
    def test_create_flushes_without_committing(self, unit_db) -> None:
        service = create_service(unit_db)
        repository = RepositoryFactory.create_booking_repository(unit_db)

        booking = repository.create(
            service_id=service.id, customer_id=CUSTOMER_ID, booking_start=_at(9)
        )

        assert booking.id is not None
        assert repository.get_by_id(booking.id).service.id == service.id
        unit_db.rollback()
        assert repository.get_by_id(booking.id, load_relationships=False) is None

    def test_exists_matches_exact_criteria(self, unit_db) -> None:
        service = create_service(unit_db)
        repository = RepositoryFactory.create_service_repository(unit_db)

        assert repository.service_exists(service.id)
        assert not repository.service_exists("missing")
