from servicebooking.repositories.job_repository import JobRepository


def test_enqueue_and_list_by_prefix(unit_db) -> None:
    repository = JobRepository(unit_db)

    job_id = repository.enqueue(type="event:BookingCreated", payload={"booking_id": "b1"})
    repository.enqueue(type="maintenance:cleanup", payload={})
    unit_db.commit()

    events = repository.list_queued("event:")
    assert [job.id for job in events] == [job_id]
    assert events[0].payload == {"booking_id": "b1"}
    assert events[0].attempts == 0
    assert len(repository.list_queued()) == 2
