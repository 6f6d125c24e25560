# backend/servicebooking/core/booking_lock.py
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
import threading
from typing import Iterator, Optional
import weakref

from redis import Redis
from redis.exceptions import LockError

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_LOCAL_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_LOCAL_LOCKS_GUARD = threading.Lock()


class LockNotAcquired(Exception):
    """Raised when a booking lock could not be obtained within the wait budget."""

    def __init__(self, key: str):
        super().__init__(f"Could not acquire lock {key}")
        self.key = key


def booking_lock_key(booking_id: str) -> str:
    return f"booking:{booking_id}:mutex"


def availability_lock_key(service_id: str, day: date) -> str:
    return f"service:{service_id}:{day.isoformat()}:availability"


def _namespaced_key(key: str) -> str:
    return f"servicebooking:lock:{key}"


def get_sync_redis() -> Optional[Redis]:
    """Shared synchronous Redis client, or None when REDIS_URL is unset or unreachable."""
    global _SYNC_REDIS
    if not settings.redis_url:
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("booking_lock_sync_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def _local_lock(key: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[key] = lock
        return lock


@contextmanager
def _redis_lock(client: Redis, key: str, ttl_s: int, wait_s: float) -> Iterator[None]:
    lock = client.lock(_namespaced_key(key), timeout=ttl_s, blocking_timeout=wait_s)
    if not lock.acquire(blocking=True):
        prometheus_metrics.record_booking_lock("acquire", "blocked")
        logger.warning("booking_lock_blocked", extra={"lock_key": key})
        raise LockNotAcquired(key)
    prometheus_metrics.record_booking_lock("acquire", "success")
    try:
        yield
    finally:
        try:
            lock.release()
        except LockError as exc:
            prometheus_metrics.record_booking_lock("release", "error")
            # TTL expired before release; another holder may already own the key.
            logger.warning(
                "booking_lock_release_failed",
                extra={"lock_key": key, "error": str(exc)},
            )


@contextmanager
def booking_lock(
    key: str, ttl_s: Optional[int] = None, wait_s: Optional[float] = None
) -> Iterator[None]:
    """
    Serialize work on ``key`` across requests.

    Uses a Redis lock when REDIS_URL is configured so that several worker
    processes share the same mutex; otherwise a process-local lock is used.

    Raises:
        LockNotAcquired: if the lock is still held by another request after ``wait_s``
    """
    ttl = ttl_s or settings.booking_lock_ttl_seconds
    wait = wait_s or settings.booking_lock_wait_seconds

    client = get_sync_redis()
    if client is not None:
        with _redis_lock(client, key, ttl, wait):
            yield
        return

    lock = _local_lock(key)
    if not lock.acquire(timeout=wait):
        prometheus_metrics.record_booking_lock("acquire", "blocked")
        logger.warning("booking_lock_blocked", extra={"lock_key": key})
        raise LockNotAcquired(key)
    prometheus_metrics.record_booking_lock("acquire", "success")
    try:
        yield
    finally:
        lock.release()


def reset_local_locks() -> None:
    """Drop process-local lock state (test helper)."""
    global _SYNC_REDIS
    with _LOCAL_LOCKS_GUARD:
        _LOCAL_LOCKS.clear()
    _SYNC_REDIS = None


__all__: list[str] = [
    "LockNotAcquired",
    "availability_lock_key",
    "booking_lock",
    "booking_lock_key",
    "get_sync_redis",
    "reset_local_locks",
]

