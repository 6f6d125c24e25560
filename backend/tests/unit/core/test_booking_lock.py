from datetime import date
import threading
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import LockError

from servicebooking.core import booking_lock as lock_module
from servicebooking.core.booking_lock import (
    LockNotAcquired,
    availability_lock_key,
    booking_lock,
    booking_lock_key,
)


def test_key_formats() -> None:
    assert booking_lock_key("b1") == "booking:b1:mutex"
    assert availability_lock_key("s1", date(2030, 1, 8)) == "service:s1:2030-01-08:availability"


def test_local_lock_times_out_while_held() -> None:
    key = booking_lock_key("b1")
    held = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with booking_lock(key):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(LockNotAcquired) as exc_info:
            with booking_lock(key, wait_s=0.05):
                pass
        assert exc_info.value.key == key
    finally:
        release.set()
        thread.join(5)


def test_different_keys_do_not_block() -> None:
    with booking_lock(booking_lock_key("b1")):
        with booking_lock(booking_lock_key("b2"), wait_s=0.05):
            pass


def test_lock_is_released_on_error() -> None:
    key = booking_lock_key("b1")
    with pytest.raises(RuntimeError):
        with booking_lock(key):
            raise RuntimeError("boom")

    with booking_lock(key, wait_s=0.05):
        pass


def test_redis_lock_used_when_configured() -> None:
    client = MagicMock()
    redis_lock = client.lock.return_value
    redis_lock.acquire.return_value = True

    with patch.object(lock_module, "get_sync_redis", return_value=client):
        with booking_lock("booking:b1:mutex", ttl_s=7, wait_s=1.5):
            pass

    client.lock.assert_called_once_with(
        "servicebooking:lock:booking:b1:mutex", timeout=7, blocking_timeout=1.5
    )
    redis_lock.release.assert_called_once()


def test_redis_lock_not_acquired() -> None:
    client = MagicMock()
    client.lock.return_value.acquire.return_value = False

    with patch.object(lock_module, "get_sync_redis", return_value=client):
        with pytest.raises(LockNotAcquired):
            with booking_lock("booking:b1:mutex"):
                pass


def test_expired_redis_lock_release_is_logged_not_raised() -> None:
    client = MagicMock()
    redis_lock = client.lock.return_value
    redis_lock.acquire.return_value = True
    redis_lock.release.side_effect = LockError("expired")

    with patch.object(lock_module, "get_sync_redis", return_value=client):
        with booking_lock("booking:b1:mutex"):
            pass


def test_no_redis_without_url() -> None:
    assert lock_module.get_sync_redis() is None
