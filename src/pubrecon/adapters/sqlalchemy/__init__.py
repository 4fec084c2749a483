"""SQLAlchemy adapter package for pubrecon."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyDraftRepository,
    SqlAlchemyEmailLogRepository,
    SqlAlchemyOfferingRelationshipRepository,
    SqlAlchemyOfferingRepository,
    SqlAlchemyPublisherRepository,
    SqlAlchemyPublisherWebsiteRepository,
    SqlAlchemyWebsiteRepository,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    build_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyDraftRepository",
    "SqlAlchemyEmailLogRepository",
    "SqlAlchemyOfferingRelationshipRepository",
    "SqlAlchemyOfferingRepository",
    "SqlAlchemyPublisherRepository",
    "SqlAlchemyPublisherWebsiteRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemyWebsiteRepository",
    "StartupError",
    "build_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
