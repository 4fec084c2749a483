from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pubrecon.domain.errors import NoOfferError
from pubrecon.domain.model import AccountStatus
from pubrecon.domain.reconciliation import (
    OfferingDecisionKind,
    PublisherActionKind,
    RelationshipActionKind,
    WebsiteActionKind,
    plan_preview,
)
from pubrecon.domain.reconciliation.preview import WEBSITE_NOT_FOUND
from tests.helpers.drafts import seed_registry, typed_payload

if TYPE_CHECKING:
    from collections.abc import Callable

    from pubrecon.adapters.sqlalchemy import SqlAlchemyReconciliationUnitOfWork

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]


def test_preview_against_empty_registry(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        plan = plan_preview(typed_payload(), repositories=uow.repositories)

    assert plan.publisher.kind is PublisherActionKind.CREATE
    assert plan.publisher.details["email"] == "jane@foo.com"
    assert plan.publisher.details["contactName"] == "Jane"
    assert plan.publisher.details["paymentMethod"] == "paypal"
    assert plan.publisher.details["accountStatus"] == "shadow"
    assert [(w.kind, w.domain) for w in plan.websites] == [(WebsiteActionKind.CREATE, "foo.com")]
    assert [o.kind for o in plan.offerings] == [OfferingDecisionKind.CREATE]
    assert plan.offerings[0].new_price == 15000
    assert [r.kind for r in plan.relationships] == [RelationshipActionKind.CREATE]
    assert plan.impact.to_dict() == {
        "newPublishers": 1,
        "newWebsites": 1,
        "newOfferings": 1,
        "updatedRecords": 0,
        "priceConflicts": 0,
        "skippedDuplicates": 0,
    }
    assert plan.warnings == []


def test_preview_requires_an_offer(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow, pytest.raises(NoOfferError):
        plan_preview(typed_payload(hasOffer=False), repositories=uow.repositories)


def test_preview_writes_nothing(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        plan_preview(typed_payload(), repositories=uow.repositories)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.publishers.get_by_email("jane@foo.com") is None
        assert uow.repositories.websites.get_by_domain("foo.com") is None


def test_preview_detects_duplicates(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        publisher, website, _ = seed_registry(
            uow, categories=["Tech"], offerings={"guest_post": 15000}, contact_name="Jane"
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        plan = plan_preview(typed_payload(), repositories=uow.repositories)

    assert plan.publisher.kind is PublisherActionKind.UPDATE
    assert plan.publisher.publisher_id == publisher.id
    assert plan.publisher.details["updates"] == {}
    assert plan.websites[0].kind is WebsiteActionKind.EXISTS
    assert plan.websites[0].website_id == website.id
    assert plan.offerings[0].kind is OfferingDecisionKind.SKIP
    assert plan.relationships[0].kind is RelationshipActionKind.EXISTS
    assert plan.impact.skipped_duplicates == 1
    assert "1 duplicate offerings will be skipped" in plan.warnings
    assert (
        "Offerings found but none will be created or updated - all are duplicates"
        in plan.warnings
    )
    assert plan.current_state.publisher is not None
    assert plan.current_state.publisher["email"] == "jane@foo.com"


def test_preview_flags_price_conflicts(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        seed_registry(uow, offerings={"guest_post": 10000})
        uow.commit()

    with sqlite_unit_of_work() as uow:
        plan = plan_preview(
            typed_payload(
                offerings=[
                    {"offeringType": "guest_post", "websiteDomain": "foo.com", "basePrice": 111}
                ]
            ),
            repositories=uow.repositories,
        )

    [action] = plan.offerings
    assert action.kind is OfferingDecisionKind.PRICE_CONFLICT
    assert action.to_dict()["priceConflict"]["percentageChange"] == 11
    assert plan.impact.price_conflicts == 1
    assert any(w.startswith("Price conflict for guest_post on foo.com") for w in plan.warnings)
    assert "1 price conflicts require manual review before approval" in plan.warnings


def test_preview_reports_tag_growth(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        seed_registry(uow, categories=["Tech"])
        uow.commit()

    with sqlite_unit_of_work() as uow:
        plan = plan_preview(
            typed_payload(websites=[{"domain": "foo.com", "categories": ["Tech", "News"]}]),
            repositories=uow.repositories,
        )

    [website] = plan.websites
    assert website.kind is WebsiteActionKind.UPDATE
    assert website.to_dict()["details"] == {"addCategories": ["News"], "addNiches": []}


def test_preview_without_publisher_email(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        plan = plan_preview(typed_payload(publisher={"email": "  "}), repositories=uow.repositories)

    assert plan.publisher.kind is PublisherActionKind.SKIP
    assert plan.relationships == []
    assert "No publisher email found - cannot create publisher record" in plan.warnings
    assert "No publisher will be created - missing email" in plan.warnings


def test_preview_skips_offerings_without_website(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        plan = plan_preview(
            typed_payload(
                offerings=[
                    {"offeringType": "guest_post", "websiteDomain": "bar.com", "basePrice": 90},
                    {"offeringType": "link_insertion", "basePrice": 40},
                ]
            ),
            repositories=uow.repositories,
        )

    assert [o.reason for o in plan.offerings] == [WEBSITE_NOT_FOUND, WEBSITE_NOT_FOUND]
    assert "Offering for bar.com - website not found, will be skipped" in plan.warnings
    assert (
        "Offering of type link_insertion has no website domain - will be skipped" in plan.warnings
    )
    assert plan.impact.new_offerings == 0


def test_preview_merges_repeated_domains(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        plan = plan_preview(
            typed_payload(
                websites=[
                    {"domain": "foo.com", "categories": ["Tech"]},
                    {"domain": "https://www.FOO.com", "categories": ["News"]},
                    {"domain": ""},
                ]
            ),
            repositories=uow.repositories,
        )

    [website] = plan.websites
    assert website.details["categories"] == ["Tech", "News"]
    assert plan.impact.new_websites == 1


def test_preview_warns_for_active_publisher(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        seed_registry(uow, account_status=AccountStatus.ACTIVE)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        plan = plan_preview(typed_payload(), repositories=uow.repositories)

    assert "Publisher Jane@Foo.com is already active - updates will be minimal" in plan.warnings


def test_plan_to_dict_shape(sqlite_unit_of_work: UowFactory) -> None:
    with sqlite_unit_of_work() as uow:
        data = plan_preview(typed_payload(), repositories=uow.repositories).to_dict()

    assert set(data) == {"draftId", "currentState", "proposedActions", "warnings", "estimatedImpact"}
    proposed = data["proposedActions"]
    assert proposed["publisherAction"] == "create"
    assert proposed["websiteActions"] == [
        {
            "action": "create",
            "domain": "foo.com",
            "details": {
                "categories": ["Tech"],
                "niche": [],
                "suggestedNewNiches": [],
                "websiteType": [],
                "domainRating": None,
            },
        }
    ]
    assert proposed["offeringActions"][0]["type"] == "guest_post"
    assert proposed["relationshipActions"] == [
        {"action": "create", "publisherEmail": "jane@foo.com", "websiteDomain": "foo.com"}
    ]
