"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import TracebackType

    from pubrecon.domain.ports.persistence import (
        DraftRepository,
        EmailLogRepository,
        OfferingRelationshipRepository,
        OfferingRepository,
        PublisherRepository,
        PublisherWebsiteRepository,
        WebsiteRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def savepoint(self) -> AbstractContextManager[None]:
        """Nested transaction; writes are flushed on exit and undone if the block fails.

        Storage failures surface as :class:`pubrecon.domain.errors.PersistenceError`.
        """
        ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ReconciliationRepositories(RepositoryCollection):
    """Repositories touched while previewing and approving drafts."""

    drafts: DraftRepository
    email_logs: EmailLogRepository
    publishers: PublisherRepository
    websites: WebsiteRepository
    offerings: OfferingRepository
    publisher_websites: PublisherWebsiteRepository
    offering_relationships: OfferingRelationshipRepository


type ReconciliationUnitOfWork = UnitOfWork[ReconciliationRepositories]
