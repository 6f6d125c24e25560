from datetime import date, time

from servicebooking.schemas.availability import TimeSegment
from servicebooking.services.schedule_resolver import ScheduleResolver
from tests.factories import SPLIT_SHIFT, add_override, add_weekly_hours, create_service

TUESDAY = date(2030, 1, 8)


class TestScheduleResolver:
    def test_weekly_hours_apply_when_no_override(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service, days=[1])

        segments = ScheduleResolver(unit_db).resolve_segments(service.id, TUESDAY)

        assert segments == [TimeSegment(start=s, end=e) for s, e in SPLIT_SHIFT]

    def test_weekday_without_hours_is_closed(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service, days=[0])

        assert ScheduleResolver(unit_db).resolve_segments(service.id, TUESDAY) == []

    def test_day_off_override_closes_the_date(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service)
        add_override(unit_db, service, TUESDAY, is_day_off=True)

        assert ScheduleResolver(unit_db).resolve_segments(service.id, TUESDAY) == []

    def test_override_segments_replace_weekly_hours(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service)
        add_override(unit_db, service, TUESDAY, segments=[(time(18, 0), time(20, 0))])

        segments = ScheduleResolver(unit_db).resolve_segments(service.id, TUESDAY)

        assert segments == [TimeSegment(start=time(18, 0), end=time(20, 0))]

    def test_override_only_affects_its_own_date(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service)
        add_override(unit_db, service, TUESDAY, is_day_off=True)

        next_tuesday = date(2030, 1, 15)
        segments = ScheduleResolver(unit_db).resolve_segments(service.id, next_tuesday)

        assert len(segments) == 2

    def test_segments_are_ordered_by_start(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(
            unit_db,
            service,
            segments=[(time(13, 0), time(17, 0)), (time(9, 0), time(12, 0))],
            days=[1],
        )

        segments = ScheduleResolver(unit_db).resolve_segments(service.id, TUESDAY)

        assert [seg.start for seg in segments] == [time(9, 0), time(13, 0)]
