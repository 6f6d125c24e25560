import logging

from pydantic import ValidationError
import pytest

from servicebooking.core.config import Settings, configure_logging


def test_defaults(monkeypatch) -> None:
    for name in ("REDIS_URL", "DATABASE_URL", "BOOKING_NOTES_MAX_LENGTH"):
        monkeypatch.delenv(name, raising=False)

    config = Settings(_env_file=None)

    assert config.database_url.startswith("sqlite")
    assert config.redis_url is None
    assert config.booking_lock_ttl_seconds == 30
    assert config.booking_notes_max_length == 1000
    assert config.notifications_enabled is True


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("BOOKING_LOCK_TTL_SECONDS", "5")
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/1")

    config = Settings(_env_file=None)

    assert config.booking_lock_ttl_seconds == 5
    assert config.notifications_enabled is False
    assert config.redis_url == "redis://localhost:6379/1"


def test_blank_redis_url_means_unset(monkeypatch) -> None:
    monkeypatch.setenv("REDIS_URL", "   ")

    assert Settings(_env_file=None).redis_url is None


@pytest.mark.parametrize(
    "name,value",
    [
        ("BOOKING_LOCK_TTL_SECONDS", "0"),
        ("BOOKING_LOCK_WAIT_SECONDS", "-1"),
        ("BOOKING_NOTES_MAX_LENGTH", "0"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_configure_logging_applies_level(monkeypatch) -> None:
    config = Settings(_env_file=None, log_level="debug")
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    configure_logging(config)

    assert calls["level"] == logging.DEBUG
