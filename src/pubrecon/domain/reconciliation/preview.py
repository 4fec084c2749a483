"""Dry-run planning: what approving a draft would create, update, or skip."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, assert_never

from pubrecon.domain.errors import NoOfferError
from pubrecon.domain.model import AccountStatus, new_id, union_preserving_order

from .conflicts import OfferingDecisionKind, classify_offering
from .defaults import RegistryDefaults
from .normalize import email_local_part, normalize_domain, normalize_email
from .plan import (
    ActionPlan,
    CurrentState,
    OfferingAction,
    PublisherAction,
    PublisherActionKind,
    RelationshipAction,
    RelationshipActionKind,
    WebsiteAction,
    WebsiteActionKind,
    offering_snapshot,
    publisher_snapshot,
    publisher_website_snapshot,
    website_snapshot,
)
from .resolve import EntityResolver

if TYPE_CHECKING:
    from uuid import UUID

    from pubrecon.domain.drafts import DraftPayload, OfferingClaim, PublisherClaim, WebsiteClaim
    from pubrecon.domain.model import Publisher
    from pubrecon.domain.ports import ReconciliationRepositories

log = logging.getLogger(__name__)

WEBSITE_NOT_FOUND = "Website not found"
IDENTICAL_OFFERING = "Identical offering already exists"


def distinct_website_claims(claims: tuple[WebsiteClaim, ...]) -> list[tuple[str, WebsiteClaim]]:
    """Key website claims by normalized domain, folding repeated domains into one claim.

    Claims without a usable domain are dropped.
    """

    merged: dict[str, WebsiteClaim] = {}
    for claim in claims:
        domain = normalize_domain(claim.domain)
        if not domain:
            continue
        previous = merged.get(domain)
        if previous is None:
            merged[domain] = claim
            continue
        merged[domain] = replace(
            previous,
            categories=tuple(
                union_preserving_order(list(previous.categories), list(claim.categories))
            ),
            niche=tuple(union_preserving_order(list(previous.niche), list(claim.niche))),
            suggested_new_niches=tuple(
                union_preserving_order(
                    list(previous.suggested_new_niches), list(claim.suggested_new_niches)
                )
            ),
        )
    return list(merged.items())


def new_publisher_details(
    claim: PublisherClaim, email: str, defaults: RegistryDefaults
) -> dict[str, object]:
    return {
        "email": email,
        "contactName": claim.contact_name or email_local_part(email),
        "companyName": claim.company_name,
        "phone": claim.phone,
        "paymentEmail": claim.payment_email,
        "paymentMethod": claim.payment_method or defaults.payment_method,
        "accountStatus": str(AccountStatus.SHADOW),
        "source": defaults.publisher_source,
    }


def _plan_publisher(
    payload: DraftPayload,
    resolver: EntityResolver,
    defaults: RegistryDefaults,
    plan: ActionPlan,
) -> Publisher | None:
    claim = payload.publisher
    email = normalize_email(payload.publisher_email)
    if claim is None or not email:
        plan.warnings.append("No publisher email found - cannot create publisher record")
        return None

    existing = resolver.find_publisher_by_email(email)
    if existing is None:
        plan.publisher = PublisherAction(
            kind=PublisherActionKind.CREATE,
            email=email,
            details=new_publisher_details(claim, email, defaults),
        )
        plan.impact.new_publishers += 1
        return None

    plan.current_state.publisher = publisher_snapshot(existing)
    filled = existing.missing_contact_fields(claim.contact_fields())
    plan.publisher = PublisherAction(
        kind=PublisherActionKind.UPDATE,
        email=email,
        publisher_id=existing.id,
        details={
            "id": str(existing.id),
            "currentEmail": existing.email,
            "updates": {_camel(name): value for name, value in filled.items()},
        },
    )
    plan.impact.updated_records += 1
    if existing.account_status == AccountStatus.ACTIVE:
        plan.warnings.append(
            f"Publisher {payload.publisher_email} is already active - updates will be minimal"
        )
    return existing


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _plan_websites(
    payload: DraftPayload, resolver: EntityResolver, plan: ActionPlan
) -> None:
    for domain, claim in distinct_website_claims(payload.websites):
        existing = resolver.find_website_by_domain(domain)
        if existing is None:
            plan.websites.append(
                WebsiteAction(
                    kind=WebsiteActionKind.CREATE,
                    domain=domain,
                    website_id=new_id(),
                    details={
                        "categories": list(claim.categories),
                        "niche": list(claim.niche),
                        "suggestedNewNiches": list(claim.suggested_new_niches),
                        "websiteType": list(claim.website_type),
                        "domainRating": claim.domain_rating,
                    },
                )
            )
            plan.impact.new_websites += 1
            continue

        plan.current_state.websites.append(website_snapshot(existing))
        growth = existing.tag_growth(categories=list(claim.categories), niche=claim.all_niches)
        plan.websites.append(
            WebsiteAction(
                kind=WebsiteActionKind.UPDATE if growth.grows else WebsiteActionKind.EXISTS,
                domain=domain,
                website_id=existing.id,
                added_categories=growth.categories,
                added_niche=growth.niche,
            )
        )
        if growth.grows:
            plan.impact.updated_records += 1


def _skip_unplaced(plan: ActionPlan, claim: OfferingClaim, domain: str) -> None:
    if claim.website_domain:
        plan.warnings.append(
            f"Offering for {claim.website_domain} - website not found, will be skipped"
        )
    else:
        plan.warnings.append(
            f"Offering of type {claim.offering_type} has no website domain - will be skipped"
        )
    plan.offerings.append(
        OfferingAction(
            kind=OfferingDecisionKind.SKIP,
            offering_type=claim.offering_type,
            domain=domain,
            reason=WEBSITE_NOT_FOUND,
        )
    )


@dataclass(slots=True)
class _PlannedOffering:
    """An offering as it will stand once earlier claims in the same draft are applied."""

    offering_id: UUID | None
    base_price: int | None


def _plan_offerings(
    payload: DraftPayload,
    resolver: EntityResolver,
    publisher: Publisher | None,
    plan: ActionPlan,
) -> None:
    planned: dict[tuple[UUID, str], _PlannedOffering] = {}
    for claim in payload.offerings:
        domain = normalize_domain(claim.website_domain)
        website_action = plan.website_for(domain) if domain else None
        if website_action is None:
            _skip_unplaced(plan, claim, domain)
            continue

        key = (website_action.website_id, claim.offering_type)
        known = planned.get(key)
        if (
            known is None
            and publisher is not None
            and website_action.kind is not WebsiteActionKind.CREATE
        ):
            match = resolver.find_active_offering(
                publisher.id, website_action.website_id, claim.offering_type
            )
            if match is not None:
                existing = match[0]
                plan.current_state.offerings.append(offering_snapshot(existing))
                known = planned[key] = _PlannedOffering(existing.id, existing.base_price)

        decision = classify_offering(claim.base_price, known)
        kind = decision.kind
        plan.offerings.append(
            OfferingAction(
                kind=kind,
                offering_type=claim.offering_type,
                domain=domain,
                existing_offering_id=known.offering_id if known is not None else None,
                new_price=decision.new_price,
                existing_price=decision.existing_price,
                price_conflict=decision.delta,
                reason=IDENTICAL_OFFERING if kind is OfferingDecisionKind.SKIP else None,
                details=dict(claim.original),
            )
        )
        if kind is OfferingDecisionKind.CREATE:
            planned[key] = _PlannedOffering(None, decision.new_price)
            plan.impact.new_offerings += 1
        elif kind is OfferingDecisionKind.UPDATE:
            if known is not None:
                known.base_price = decision.new_price
            plan.impact.updated_records += 1
        elif kind is OfferingDecisionKind.SKIP:
            plan.impact.skipped_duplicates += 1
        elif kind is OfferingDecisionKind.PRICE_CONFLICT:
            plan.impact.price_conflicts += 1
            if decision.delta is not None:
                plan.warnings.append(
                    f"Price conflict for {claim.offering_type} on {domain}: "
                    f"{decision.delta.describe()}"
                )
        else:
            assert_never(kind)


def _plan_relationships(
    publisher: Publisher | None, resolver: EntityResolver, plan: ActionPlan
) -> None:
    if plan.publisher.kind is PublisherActionKind.SKIP or plan.publisher.email is None:
        return
    for website_action in plan.websites:
        link = None
        if publisher is not None and website_action.kind is not WebsiteActionKind.CREATE:
            link = resolver.find_publisher_website(publisher.id, website_action.website_id)
        if link is None:
            plan.relationships.append(
                RelationshipAction(
                    kind=RelationshipActionKind.CREATE,
                    publisher_email=plan.publisher.email,
                    domain=website_action.domain,
                )
            )
            continue
        plan.current_state.relationships.append(publisher_website_snapshot(link))
        plan.relationships.append(
            RelationshipAction(
                kind=RelationshipActionKind.EXISTS,
                publisher_email=plan.publisher.email,
                domain=website_action.domain,
                existing_link_id=link.id,
            )
        )


def _summarize(payload: DraftPayload, plan: ActionPlan) -> None:
    impact = plan.impact
    if impact.price_conflicts:
        plan.warnings.append(
            f"{impact.price_conflicts} price conflicts require manual review before approval"
        )
    if impact.skipped_duplicates:
        plan.warnings.append(f"{impact.skipped_duplicates} duplicate offerings will be skipped")
    if plan.publisher.kind is PublisherActionKind.SKIP:
        plan.warnings.append("No publisher will be created - missing email")
    if not plan.websites:
        plan.warnings.append("No websites will be created or linked")
    if payload.offerings and impact.skipped_duplicates == len(payload.offerings):
        plan.warnings.append(
            "Offerings found but none will be created or updated - all are duplicates"
        )


def plan_preview(
    payload: DraftPayload,
    *,
    repositories: ReconciliationRepositories,
    draft_id: UUID | None = None,
    defaults: RegistryDefaults | None = None,
) -> ActionPlan:
    """Compute the actions approving ``payload`` would take. Reads only."""

    if not payload.has_offer:
        raise NoOfferError(draft_id)

    resolver = EntityResolver(repositories)
    plan = ActionPlan(
        publisher=PublisherAction(kind=PublisherActionKind.SKIP),
        draft_id=draft_id,
        current_state=CurrentState(),
    )
    publisher = _plan_publisher(payload, resolver, defaults or RegistryDefaults(), plan)
    _plan_websites(payload, resolver, plan)
    _plan_offerings(payload, resolver, publisher, plan)
    _plan_relationships(publisher, resolver, plan)
    _summarize(payload, plan)

    log.info(
        "Preview for draft %s: %d publishers, %d websites, %d offerings, %d conflicts",
        draft_id,
        plan.impact.new_publishers,
        plan.impact.new_websites,
        plan.impact.new_offerings,
        plan.impact.price_conflicts,
    )
    return plan
