"""Concurrent creates against a shared file-backed database."""

from datetime import datetime
import threading
from typing import List
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

from servicebooking.core.clock import FixedClock
from servicebooking.core.exceptions import SlotUnavailableException
from servicebooking.database import Base, build_engine
from servicebooking.models import Booking, BookingStatus
from servicebooking.schemas.booking import BookingCreate
from servicebooking.services.booking_service import BookingService
from tests.factories import NOW, add_weekly_hours, create_service

pytestmark = pytest.mark.integration


@pytest.fixture
def file_engine(tmp_path):
    engine = build_engine(f"sqlite+pysqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


def _run_concurrently(engine, requests) -> List[object]:
    barrier = threading.Barrier(len(requests))
    results: List[object] = [None] * len(requests)

    def worker(index: int, service_id: str, start: datetime, customer_id: str) -> None:
        session = Session(bind=engine, expire_on_commit=False)
        booking_service = BookingService(
            session, clock=FixedClock(NOW), notification_service=Mock()
        )
        barrier.wait()
        try:
            booking = booking_service.create_booking(
                BookingCreate(service_id=service_id, booking_start=start), customer_id
            )
            results[index] = booking.status
        except Exception as exc:
            results[index] = exc
        finally:
            session.close()

    threads = [
        threading.Thread(target=worker, args=(i, *request)) for i, request in enumerate(requests)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def test_overlapping_creates_admit_exactly_one(file_engine) -> None:
    with Session(bind=file_engine, expire_on_commit=False) as session:
        service = create_service(session)
        add_weekly_hours(session, service)
        service_id = service.id

    results = _run_concurrently(
        file_engine,
        [
            (service_id, datetime(2030, 1, 8, 10, 0), "customer-a"),
            (service_id, datetime(2030, 1, 8, 10, 30), "customer-b"),
        ],
    )

    winners = [r for r in results if r == BookingStatus.PENDING.value]
    losers = [r for r in results if isinstance(r, SlotUnavailableException)]
    assert len(winners) == 1
    assert len(losers) == 1

    with Session(bind=file_engine) as session:
        assert session.query(Booking).count() == 1


def test_creates_on_different_services_do_not_block_each_other(file_engine) -> None:
    with Session(bind=file_engine, expire_on_commit=False) as session:
        first = create_service(session, name="Cut")
        second = create_service(session, name="Colour")
        add_weekly_hours(session, first)
        add_weekly_hours(session, second)
        ids = (first.id, second.id)

    start = datetime(2030, 1, 8, 10, 0)
    results = _run_concurrently(
        file_engine,
        [(ids[0], start, "customer-a"), (ids[1], start, "customer-b")],
    )

    assert results == [BookingStatus.PENDING.value, BookingStatus.PENDING.value]
