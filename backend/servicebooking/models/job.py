# backend/servicebooking/models/job.py
import ulid
from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class BackgroundJob(Base):
    """Persisted background job entry; booking events wait here for the mail worker."""

    __tablename__ = "background_jobs"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    type = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="queued")
    attempts = Column(Integer, nullable=False, default=0)
    available_at = Column(DateTime, nullable=False, server_default=func.now())
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
