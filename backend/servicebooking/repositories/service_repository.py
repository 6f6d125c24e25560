# backend/servicebooking/repositories/service_repository.py
"""
Service directory: existence, active flag, duration and owning provider.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.service import Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceRepository(BaseRepository[Service]):
    """Read access to services for availability and authorization checks."""

    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_service(self, service_id: str) -> Optional[Service]:
        return self.get_by_id(service_id, load_relationships=False)

    def service_exists(self, service_id: str) -> bool:
        return self.exists(id=service_id)
