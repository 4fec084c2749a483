"""Read-only identity resolution against the registry.

Preview and approval share one resolver so both see the same normalization and
the same queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .normalize import normalize_domain, normalize_email

if TYPE_CHECKING:
    from uuid import UUID

    from pubrecon.domain.model import (
        Offering,
        OfferingRelationship,
        Publisher,
        PublisherWebsite,
        Website,
    )
    from pubrecon.domain.ports import ReconciliationRepositories


class EntityResolver:
    def __init__(self, repositories: ReconciliationRepositories) -> None:
        self.repositories = repositories

    def find_publisher_by_email(self, email: str | None) -> Publisher | None:
        key = normalize_email(email)
        if not key:
            return None
        return self.repositories.publishers.get_by_email(key)

    def find_website_by_domain(self, domain: str | None) -> Website | None:
        key = normalize_domain(domain)
        if not key:
            return None
        return self.repositories.websites.get_by_domain(key)

    def find_active_offering(
        self, publisher_id: UUID, website_id: UUID, offering_type: str
    ) -> tuple[Offering, OfferingRelationship] | None:
        return self.repositories.offerings.find_active(
            publisher_id=publisher_id, website_id=website_id, offering_type=offering_type
        )

    def find_publisher_website(
        self, publisher_id: UUID, website_id: UUID
    ) -> PublisherWebsite | None:
        return self.repositories.publisher_websites.find(
            publisher_id=publisher_id, website_id=website_id
        )

    def find_offering_relationship(
        self, publisher_id: UUID, website_id: UUID
    ) -> OfferingRelationship | None:
        return self.repositories.offering_relationships.find_unattached(
            publisher_id=publisher_id, website_id=website_id
        )
