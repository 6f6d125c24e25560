from datetime import date, time

from servicebooking.repositories import RepositoryFactory
from tests.factories import add_override, add_weekly_hours, create_service

MORNING = (time(9, 0), time(12, 0))
EVENING = (time(18, 0), time(21, 0))


class TestWeeklyHours:
    def test_lookup_by_weekday(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service, segments=[MORNING], days=[0, 2])
        repository = RepositoryFactory.create_schedule_repository(unit_db)

        monday = repository.get_operating_hour(service.id, 0)

        assert [(s.start_time, s.end_time) for s in monday.segments] == [MORNING]
        assert repository.get_operating_hour(service.id, 1) is None
        assert [hour.day_of_week for hour in repository.get_weekly_hours(service.id)] == [0, 2]

    def test_replace_drops_previous_rows(self, unit_db) -> None:
        service = create_service(unit_db)
        add_weekly_hours(unit_db, service, segments=[MORNING])
        repository = RepositoryFactory.create_schedule_repository(unit_db)

        created = repository.replace_weekly_hours(service.id, [(4, [EVENING]), (5, [])])
        unit_db.commit()

        assert len(created) == 1
        hours = repository.get_weekly_hours(service.id)
        assert [hour.day_of_week for hour in hours] == [4]
        assert [(s.start_time, s.end_time) for s in hours[0].segments] == [EVENING]


class TestOverrides:
    def test_create_get_and_delete(self, unit_db) -> None:
        service = create_service(unit_db)
        repository = RepositoryFactory.create_schedule_repository(unit_db)
        on_date = date(2030, 1, 8)

        override = repository.create_override(service.id, on_date, False, [EVENING])
        unit_db.commit()

        found = repository.get_override(service.id, on_date)
        assert found.id == override.id
        assert repository.get_override_by_id(override.id).is_day_off is False
        assert repository.get_override(service.id, date(2030, 1, 9)) is None

        repository.delete_override(found)
        unit_db.commit()

        assert repository.get_override(service.id, on_date) is None

    def test_list_from_date(self, unit_db) -> None:
        service = create_service(unit_db)
        add_override(unit_db, service, date(2030, 1, 10), is_day_off=True)
        add_override(unit_db, service, date(2030, 1, 8), is_day_off=True)
        repository = RepositoryFactory.create_schedule_repository(unit_db)

        assert [o.date for o in repository.list_overrides(service.id)] == [
            date(2030, 1, 8),
            date(2030, 1, 10),
        ]
        assert [o.date for o in repository.list_overrides(service.id, date(2030, 1, 9))] == [
            date(2030, 1, 10)
        ]
