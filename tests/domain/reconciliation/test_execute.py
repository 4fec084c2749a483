from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import func, select

from pubrecon.adapters.extraction import effective_payload
from pubrecon.domain.errors import (
    DraftAlreadyApprovedError,
    MissingPublisherEmailError,
    NoOfferError,
)
from pubrecon.domain.model import (
    AccountStatus,
    Availability,
    DraftStatus,
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    RecordStatus,
    Website,
)
from pubrecon.domain.reconciliation import (
    ApprovalManifest,
    ConflictResolution,
    RegistryDefaults,
    execute_plan,
)
from tests.helpers.drafts import offer_payload, seed_draft, seed_registry

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from pubrecon.adapters.sqlalchemy import SqlAlchemyReconciliationUnitOfWork

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]


def _execute(
    uow: SqlAlchemyReconciliationUnitOfWork, draft_id: UUID, *, force: bool = False
) -> ApprovalManifest:
    draft = uow.repositories.drafts.get(draft_id)
    assert draft is not None
    email_log = uow.repositories.email_logs.get(draft.email_log_id) if draft.email_log_id else None
    return execute_plan(
        draft,
        effective_payload(draft),
        uow=uow,
        email_log=email_log,
        force_resolve_conflicts=force,
        defaults=RegistryDefaults(),
    )


def _approve(
    factory: UowFactory, draft_id: UUID, *, force: bool = False
) -> ApprovalManifest:
    with factory() as uow:
        return _execute(uow, draft_id, force=force)


def _row_counts(factory: UowFactory) -> dict[str, int]:
    with factory() as uow:
        return {
            entity.__name__: uow.session.scalar(select(func.count()).select_from(entity)) or 0
            for entity in (Publisher, Website, PublisherWebsite, Offering, OfferingRelationship)
        }


def _miss_first_lookup(monkeypatch: pytest.MonkeyPatch, repository: object, name: str) -> None:
    """First call finds nothing, as if a concurrent insert had not committed yet."""

    lookup = getattr(repository, name)
    calls: list[object] = []

    def _lookup(*args: Any, **kwargs: Any) -> Any:
        calls.append(args)
        if len(calls) == 1:
            return None
        return lookup(*args, **kwargs)

    monkeypatch.setattr(repository, name, _lookup)


def _offerings(**prices: Any) -> list[dict[str, Any]]:
    return [
        {"offeringType": offering_type, "websiteDomain": "foo.com", "basePrice": price}
        for offering_type, price in prices.items()
    ]


def test_approve_creates_registry_records(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(sqlite_unit_of_work)

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.success
    assert manifest.created.publisher_id is not None
    assert len(manifest.created.website_ids) == 1
    assert len(manifest.created.offering_ids) == 1
    assert len(manifest.created.relationship_ids) == 1
    assert len(manifest.created.publisher_website_ids) == 1

    with sqlite_unit_of_work() as uow:
        publisher = uow.repositories.publishers.get_by_email("jane@foo.com")
        assert publisher is not None
        assert publisher.contact_name == "Jane"
        assert publisher.account_status is AccountStatus.SHADOW
        assert publisher.status is RecordStatus.PENDING
        assert publisher.payment_method == "paypal"
        assert publisher.source == "manyreach"
        assert publisher.confidence_score == pytest.approx(0.9)
        assert publisher.source_metadata["draftId"] == str(draft.id)
        assert publisher.source_metadata["campaignId"] == "campaign-1"

        website = uow.repositories.websites.get_by_domain("foo.com")
        assert website is not None
        assert website.categories == ["Tech"]
        assert uow.repositories.publisher_websites.find(
            publisher_id=publisher.id, website_id=website.id
        )

        match = uow.repositories.offerings.find_active(
            publisher_id=publisher.id, website_id=website.id, offering_type="guest_post"
        )
        assert match is not None
        offering, relationship = match
        assert offering.base_price == 15000
        assert offering.currency == "USD"
        assert offering.turnaround_days == 5
        assert offering.current_availability is Availability.AVAILABLE
        assert offering.attributes["dataCompleteness"] == "complete"
        assert offering.pricing_extracted_from is not None
        assert "$150" in offering.pricing_extracted_from
        assert relationship.contact_email == "jane@foo.com"

        stored = uow.repositories.drafts.get(draft.id)
        assert stored is not None
        assert stored.status is DraftStatus.APPROVED
        assert stored.reviewed_at is not None
        assert stored.publisher_id == publisher.id
        assert stored.website_id == website.id


def test_approving_twice_fails_without_writes(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(sqlite_unit_of_work)
    _approve(sqlite_unit_of_work, draft.id)
    before = _row_counts(sqlite_unit_of_work)

    with pytest.raises(DraftAlreadyApprovedError):
        _approve(sqlite_unit_of_work, draft.id)

    assert _row_counts(sqlite_unit_of_work) == before
    assert before["Publisher"] == before["Website"] == before["Offering"] == 1


def test_second_draft_reuses_registry_records(sqlite_unit_of_work: UowFactory) -> None:
    first = seed_draft(sqlite_unit_of_work)
    second = seed_draft(sqlite_unit_of_work)
    created = _approve(sqlite_unit_of_work, first.id)

    manifest = _approve(sqlite_unit_of_work, second.id)

    assert manifest.created.publisher_id is None
    assert manifest.publisher_id == created.publisher_id
    assert manifest.created.website_ids == []
    assert manifest.created.offering_ids == []
    assert manifest.created.relationship_ids == []
    assert manifest.created.publisher_website_ids == []
    assert manifest.skipped.duplicate_offerings == 1
    assert manifest.skipped.existing_relationships == 1


def test_failing_offering_does_not_abort_approval(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(
        sqlite_unit_of_work,
        offer_payload(offerings=_offerings(guest_post=150, link_insertion=-40)),
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert not manifest.success
    assert len(manifest.errors) == 1
    assert "link_insertion" in manifest.errors[0]
    assert len(manifest.created.offering_ids) == 1

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.drafts.get(draft.id)
        assert stored is not None
        assert stored.status is DraftStatus.APPROVED
        publisher = uow.repositories.publishers.get_by_email("jane@foo.com")
        website = uow.repositories.websites.get_by_domain("foo.com")
        assert publisher is not None and website is not None
        assert uow.repositories.offerings.find_active(
            publisher_id=publisher.id, website_id=website.id, offering_type="guest_post"
        )
        assert (
            uow.repositories.offerings.find_active(
                publisher_id=publisher.id, website_id=website.id, offering_type="link_insertion"
            )
            is None
        )


def test_price_conflict_is_skipped_unless_forced(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        _, _, offerings = seed_registry(uow, offerings={"guest_post": 10000})
        uow.commit()
    offering_id = offerings["guest_post"].id
    payload = offer_payload(offerings=_offerings(guest_post=111))

    skipped = _approve(sqlite_unit_of_work, seed_draft(sqlite_unit_of_work, payload).id)

    assert skipped.skipped.price_conflicts == 1
    assert [record.action for record in skipped.price_conflicts] == [ConflictResolution.SKIPPED]
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.offerings.get(offering_id)
        assert stored is not None
        assert stored.base_price == 10000

    forced = _approve(
        sqlite_unit_of_work, seed_draft(sqlite_unit_of_work, payload).id, force=True
    )

    assert forced.skipped.price_conflicts == 0
    assert forced.updated.offerings_updated == [offering_id]
    assert forced.price_conflicts[0].to_dict() == {
        "offeringType": "guest_post",
        "domain": "foo.com",
        "existingPrice": 10000,
        "newPrice": 11100,
        "action": "updated",
    }
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.offerings.get(offering_id)
        assert stored is not None
        assert stored.base_price == 11100


def test_small_price_change_updates_offering(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        _, _, offerings = seed_registry(uow, offerings={"guest_post": 10000})
        offerings["guest_post"].turnaround_days = 7
        uow.commit()
    offering_id = offerings["guest_post"].id
    draft = seed_draft(
        sqlite_unit_of_work, offer_payload(offerings=_offerings(guest_post="$105"))
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.updated.offerings_updated == [offering_id]
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.offerings.get(offering_id)
        assert stored is not None
        assert stored.base_price == 10500
        assert stored.turnaround_days == 7
        assert "lastUpdated" in stored.attributes


def test_offering_without_price_needs_info(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(
        sqlite_unit_of_work, offer_payload(offerings=_offerings(guest_post=None))
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    with sqlite_unit_of_work() as uow:
        offering = uow.repositories.offerings.get(manifest.created.offering_ids[0])
        assert offering is not None
        assert offering.base_price is None
        assert offering.current_availability is Availability.NEEDS_INFO
        assert offering.attributes["followUpRequired"] is True
        assert offering.attributes["dataCompleteness"] == "needs_pricing"
        assert offering.pricing_extracted_from is None


def test_unplaced_offerings_are_reported(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(
        sqlite_unit_of_work,
        offer_payload(
            offerings=[
                {"offeringType": "guest_post", "websiteDomain": "bar.com", "basePrice": 80},
                {"offeringType": "link_insertion", "basePrice": 40},
            ]
        ),
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.errors == [
        "Website bar.com not found for offering",
        "Offering of type link_insertion has no website domain",
    ]
    assert manifest.to_dict()["success"] is False


def test_missing_publisher_email_rejects_before_writing(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(sqlite_unit_of_work, offer_payload(publisher=None))

    with pytest.raises(MissingPublisherEmailError):
        _approve(sqlite_unit_of_work, draft.id)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.drafts.get(draft.id)
        assert stored is not None
        assert stored.status is DraftStatus.PENDING
        assert uow.repositories.websites.get_by_domain("foo.com") is None


def test_draft_without_offer_is_rejected(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(sqlite_unit_of_work, offer_payload(hasOffer=False))

    with pytest.raises(NoOfferError):
        _approve(sqlite_unit_of_work, draft.id)


def test_existing_publisher_gets_missing_contact_fields(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        publisher, _, _ = seed_registry(uow, contact_name="J. Doe")
        uow.commit()
    draft = seed_draft(
        sqlite_unit_of_work,
        offer_payload(
            publisher={"email": "jane@foo.com", "contactName": "Jane", "phone": "+1 555"}
        ),
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.updated.publisher_updated
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.publishers.get(publisher.id)
        assert stored is not None
        assert stored.contact_name == "J. Doe"
        assert stored.phone == "+1 555"


def test_website_tags_only_grow(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        _, website, _ = seed_registry(uow, categories=["Tech", "News"])
        uow.commit()
    draft = seed_draft(
        sqlite_unit_of_work,
        offer_payload(websites=[{"domain": "foo.com", "categories": ["Finance"]}]),
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.updated.websites_updated == [website.id]
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.websites.get(website.id)
        assert stored is not None
        assert stored.categories == ["Tech", "News", "Finance"]


def test_unresolved_offering_does_not_block_the_rest(sqlite_unit_of_work: UowFactory) -> None:
    draft = seed_draft(
        sqlite_unit_of_work,
        offer_payload(
            offerings=[
                {"offeringType": "guest_post", "websiteDomain": "foo.com", "basePrice": 150},
                {"offeringType": "guest_post", "websiteDomain": "bar.com", "basePrice": 90},
            ]
        ),
    )

    manifest = _approve(sqlite_unit_of_work, draft.id)

    assert manifest.created.publisher_id is not None
    assert len(manifest.created.website_ids) == 1
    assert len(manifest.created.offering_ids) == 1
    assert manifest.errors == ["Website bar.com not found for offering"]
    assert _row_counts(sqlite_unit_of_work) == {
        "Publisher": 1,
        "Website": 1,
        "PublisherWebsite": 1,
        "Offering": 1,
        "OfferingRelationship": 1,
    }


def test_publisher_inserted_concurrently_is_updated(
    sqlite_unit_of_work: UowFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    with sqlite_unit_of_work() as uow:
        publisher = Publisher(email="jane@foo.com")
        uow.repositories.publishers.add(publisher)
        uow.commit()
    draft = seed_draft(sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        _miss_first_lookup(monkeypatch, uow.repositories.publishers, "get_by_email")
        manifest = _execute(uow, draft.id)

    assert manifest.created.publisher_id is None
    assert manifest.publisher_id == publisher.id
    assert manifest.updated.publisher_updated
    assert len(manifest.created.offering_ids) == 1
    assert _row_counts(sqlite_unit_of_work)["Publisher"] == 1
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.publishers.get(publisher.id)
        assert stored is not None
        assert stored.contact_name == "Jane"


def test_website_inserted_concurrently_is_merged(
    sqlite_unit_of_work: UowFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    with sqlite_unit_of_work() as uow:
        website = Website(domain="foo.com")
        uow.repositories.websites.add(website)
        uow.commit()
    draft = seed_draft(sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        _miss_first_lookup(monkeypatch, uow.repositories.websites, "get_by_domain")
        manifest = _execute(uow, draft.id)

    assert manifest.created.website_ids == []
    assert manifest.updated.websites_updated == [website.id]
    assert len(manifest.created.offering_ids) == 1
    assert _row_counts(sqlite_unit_of_work)["Website"] == 1
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.websites.get(website.id)
        assert stored is not None
        assert stored.categories == ["Tech"]


def test_link_inserted_concurrently_is_skipped(
    sqlite_unit_of_work: UowFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    with sqlite_unit_of_work() as uow:
        seed_registry(uow, categories=["Tech"], contact_name="Jane")
        uow.commit()
    draft = seed_draft(sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        _miss_first_lookup(monkeypatch, uow.repositories.publisher_websites, "find")
        manifest = _execute(uow, draft.id)

    assert manifest.created.publisher_website_ids == []
    assert manifest.skipped.existing_relationships == 1
    assert manifest.success
    assert _row_counts(sqlite_unit_of_work)["PublisherWebsite"] == 1
