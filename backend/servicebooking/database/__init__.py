"""
Database engine factory and metadata shared across the engine.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, declarative_base

from servicebooking.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str | None = None, **kwargs: Any) -> Engine:
    """Create an engine for the configured (or given) database URL."""
    url = database_url or settings.database_url
    engine_kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    engine_kwargs.update(kwargs)
    logger.debug("Creating database engine for dialect %s", url.split(":", 1)[0])
    return create_engine(url, **engine_kwargs)


Base: DeclarativeMeta = declarative_base()


__all__ = ["Base", "build_engine"]
