"""Repository for persisted background jobs."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import ulid

from ..core.exceptions import RepositoryException
from ..models.job import BackgroundJob

logger = logging.getLogger(__name__)


class JobRepository:
    """Data access helpers for the background_jobs table."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logger

    def enqueue(
        self,
        *,
        type: str,
        payload: dict[str, Any],
        available_at: datetime | None = None,
    ) -> str:
        """Persist a new job ready for processing; does NOT commit."""

        try:
            job_id = str(ulid.ULID())
            job = BackgroundJob(
                id=job_id,
                type=type,
                payload=payload,
                status="queued",
                attempts=0,
            )
            if available_at is not None:
                job.available_at = available_at
            self.db.add(job)
            self.db.flush()
            return job_id
        except SQLAlchemyError as exc:
            self.logger.error("Failed to enqueue job %s: %s", type, str(exc))
            self.db.rollback()
            raise RepositoryException("Failed to enqueue background job") from exc

    def list_queued(self, type_prefix: str = "") -> List[BackgroundJob]:
        """Queued jobs, oldest first, optionally filtered by type prefix."""
        try:
            query = self.db.query(BackgroundJob).filter(BackgroundJob.status == "queued")
            if type_prefix:
                query = query.filter(BackgroundJob.type.startswith(type_prefix))
            return query.order_by(BackgroundJob.created_at.asc(), BackgroundJob.id.asc()).all()
        except SQLAlchemyError as exc:
            self.logger.error("Failed to list queued jobs: %s", str(exc))
            raise RepositoryException("Failed to fetch background jobs") from exc
