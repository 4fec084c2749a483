"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    DraftRepository,
    EmailLogRepository,
    OfferingRelationshipRepository,
    OfferingRepository,
    PublisherRepository,
    PublisherWebsiteRepository,
    Repository,
    WebsiteRepository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "DraftRepository",
    "EmailLogRepository",
    "OfferingRelationshipRepository",
    "OfferingRepository",
    "PublisherRepository",
    "PublisherWebsiteRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "WebsiteRepository",
]
