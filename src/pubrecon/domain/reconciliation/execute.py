"""Apply a draft to the registry inside one unit of work.

The executor replays the planner's resolution logic against live rows and
performs the writes. Precondition failures raise before anything is touched;
failures while applying a single offering are confined to that offering's
savepoint and reported in the manifest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pubrecon.domain.drafts import DraftEvent, apply_event, ensure_transition
from pubrecon.domain.errors import (
    ConstraintViolationError,
    DraftAlreadyApprovedError,
    MissingPublisherEmailError,
    NoOfferError,
    PersistenceError,
)
from pubrecon.domain.model import (
    AccountStatus,
    Offering,
    OfferingRelationship,
    Publisher,
    PublisherWebsite,
    RecordStatus,
    Website,
    union_preserving_order,
    utc_now,
)

from .conflicts import OfferingDecisionKind, classify_offering
from .defaults import RegistryDefaults
from .evidence import extract_pricing_snippet
from .manifest import ApprovalManifest, ConflictResolution, PriceConflictRecord
from .normalize import email_local_part, normalize_domain, normalize_email
from .preview import distinct_website_claims
from .resolve import EntityResolver

if TYPE_CHECKING:
    from uuid import UUID

    from pubrecon.domain.drafts import DraftPayload, OfferingClaim, PublisherClaim, WebsiteClaim
    from pubrecon.domain.model import Draft, EmailLog
    from pubrecon.domain.ports import ReconciliationUnitOfWork

    from .conflicts import PriceDelta

log = logging.getLogger(__name__)

NO_PRICE_NOTE = "Publisher mentioned fees but no specific price provided"


@dataclass(frozen=True, slots=True, kw_only=True)
class _OfferingOutcome:
    kind: OfferingDecisionKind
    offering_id: UUID | None = None
    relationship_id: UUID | None = None
    updated: bool = False
    conflict: PriceConflictRecord | None = None


@dataclass(slots=True, kw_only=True)
class _ApprovalRun:
    draft: Draft
    payload: DraftPayload
    publisher_claim: PublisherClaim
    uow: ReconciliationUnitOfWork
    email_log: EmailLog | None
    defaults: RegistryDefaults
    force_resolve_conflicts: bool
    manifest: ApprovalManifest

    @property
    def resolver(self) -> EntityResolver:
        return EntityResolver(self.uow.repositories)

    # Publisher ---------------------------------------------------------------

    def resolve_publisher(self, email: str) -> Publisher:
        claim = self.publisher_claim
        existing = self.resolver.find_publisher_by_email(email)
        if existing is None:
            publisher = self._new_publisher(email)
            try:
                with self.uow.savepoint():
                    self.uow.repositories.publishers.add(publisher)
            except ConstraintViolationError:
                existing = self.resolver.find_publisher_by_email(email)
                if existing is None:
                    raise
                log.info("Publisher %s was created concurrently, updating instead", email)
            else:
                self.manifest.created.publisher_id = publisher.id
                log.info("Created publisher %s (%s)", publisher.id, email)
                return publisher

        filled = existing.fill_contact_fields(claim.contact_fields())
        if filled:
            self.manifest.updated.publisher_updated = True
            log.info("Filled %s on publisher %s", ", ".join(sorted(filled)), existing.id)
        return existing

    def _new_publisher(self, email: str) -> Publisher:
        claim = self.publisher_claim
        confidence = self.payload.extraction_metadata.confidence
        return Publisher(
            email=email,
            contact_name=claim.contact_name or email_local_part(email),
            company_name=claim.company_name,
            phone=claim.phone,
            payment_email=claim.payment_email,
            payment_method=claim.payment_method or self.defaults.payment_method,
            account_status=AccountStatus.SHADOW,
            status=RecordStatus.PENDING,
            source=self.defaults.publisher_source,
            source_metadata={
                "draftId": str(self.draft.id),
                "emailLogId": str(self.draft.email_log_id) if self.draft.email_log_id else None,
                "campaignId": self.email_log.campaign_id if self.email_log else None,
                "extractedAt": utc_now().isoformat(),
            },
            confidence_score=(
                confidence if confidence is not None else self.defaults.confidence_score
            ),
        )

    # Websites ----------------------------------------------------------------

    def resolve_website(self, domain: str, claim: WebsiteClaim) -> Website:
        existing = self.resolver.find_website_by_domain(domain)
        if existing is None:
            website = Website(
                domain=domain,
                categories=union_preserving_order([], list(claim.categories)),
                niche=union_preserving_order([], claim.all_niches),
                website_type=list(claim.website_type),
                domain_rating=claim.domain_rating,
                internal_notes=claim.internal_notes,
                status=RecordStatus.ACTIVE,
                source=self.defaults.publisher_source,
            )
            try:
                with self.uow.savepoint():
                    self.uow.repositories.websites.add(website)
            except ConstraintViolationError:
                existing = self.resolver.find_website_by_domain(domain)
                if existing is None:
                    raise
                log.info("Website %s was created concurrently, merging instead", domain)
            else:
                self.manifest.created.website_ids.append(website.id)
                log.info("Created website %s (%s)", website.id, domain)
                return website

        growth = existing.merge_tags(categories=list(claim.categories), niche=claim.all_niches)
        if growth.grows:
            self.manifest.updated.websites_updated.append(existing.id)
            log.info(
                "Merged tags into website %s: categories=%s niche=%s",
                domain,
                list(growth.categories),
                list(growth.niche),
            )
        return existing

    def link_publisher_website(self, publisher: Publisher, website_id: UUID) -> None:
        if self.resolver.find_publisher_website(publisher.id, website_id) is not None:
            self.manifest.skipped.existing_relationships += 1
            return
        link = PublisherWebsite(
            publisher_id=publisher.id, website_id=website_id, status=RecordStatus.ACTIVE
        )
        try:
            with self.uow.savepoint():
                self.uow.repositories.publisher_websites.add(link)
        except ConstraintViolationError:
            if self.resolver.find_publisher_website(publisher.id, website_id) is None:
                raise
            self.manifest.skipped.existing_relationships += 1
            return
        self.manifest.created.publisher_website_ids.append(link.id)

    # Offerings ---------------------------------------------------------------

    def apply_offering(
        self, publisher: Publisher, claim: OfferingClaim, domain: str, website_id: UUID
    ) -> _OfferingOutcome:
        match = self.resolver.find_active_offering(publisher.id, website_id, claim.offering_type)
        existing = match[0] if match is not None else None
        decision = classify_offering(claim.base_price, existing)

        if existing is None:
            offering = self._create_offering(publisher, claim, decision.new_price)
            relationship_id = self._attach_offering(publisher, website_id, offering)
            return _OfferingOutcome(
                kind=OfferingDecisionKind.CREATE,
                offering_id=offering.id,
                relationship_id=relationship_id,
            )
        new_price = decision.new_price
        if decision.kind is OfferingDecisionKind.SKIP or new_price is None:
            return _OfferingOutcome(kind=OfferingDecisionKind.SKIP)

        delta = decision.delta
        if decision.kind is not OfferingDecisionKind.PRICE_CONFLICT or delta is None:
            self._update_offering(existing, claim, new_price)
            return _OfferingOutcome(
                kind=OfferingDecisionKind.UPDATE, offering_id=existing.id, updated=True
            )
        if not self.force_resolve_conflicts:
            log.warning(
                "Skipping price conflict: %s on %s (%s)",
                claim.offering_type,
                domain,
                delta.describe(),
            )
            return _OfferingOutcome(
                kind=OfferingDecisionKind.PRICE_CONFLICT,
                conflict=self._conflict(claim, domain, delta, ConflictResolution.SKIPPED),
            )
        self._update_offering(existing, claim, new_price)
        log.warning(
            "Forced price change: %s on %s (%s)", claim.offering_type, domain, delta.describe()
        )
        return _OfferingOutcome(
            kind=OfferingDecisionKind.PRICE_CONFLICT,
            offering_id=existing.id,
            updated=True,
            conflict=self._conflict(claim, domain, delta, ConflictResolution.UPDATED),
        )

    @staticmethod
    def _conflict(
        claim: OfferingClaim,
        domain: str,
        delta: PriceDelta,
        action: ConflictResolution,
    ) -> PriceConflictRecord:
        return PriceConflictRecord(
            offering_type=claim.offering_type,
            domain=domain,
            existing_price=delta.existing_price,
            new_price=delta.new_price,
            action=action,
        )

    def _create_offering(
        self, publisher: Publisher, claim: OfferingClaim, new_price: int | None
    ) -> Offering:
        has_price = new_price is not None
        content = self.email_log.source_content if self.email_log is not None else None
        snippet = None
        if self.email_log is not None:
            snippet = extract_pricing_snippet(
                content,
                claim.base_price if has_price else None,
                pricing_source=self.payload.extraction_metadata.pricing_source,
            )
        offering = Offering(
            publisher_id=publisher.id,
            offering_type=claim.offering_type,
            base_price=new_price,
            currency=claim.currency or self.defaults.currency,
            turnaround_days=claim.turnaround_days or None,
            min_word_count=claim.min_word_count or None,
            max_word_count=claim.max_word_count or None,
            languages=["en"],
            attributes={
                "requirements": claim.requirements,
                "originalExtraction": dict(claim.original),
                "dataCompleteness": "complete" if has_price else "needs_pricing",
                "followUpRequired": not has_price,
                "extractedInfo": None if has_price else NO_PRICE_NOTE,
            },
            is_active=True,
            source_email_id=self.draft.email_log_id,
            source_email_content=content,
            pricing_extracted_from=snippet,
        )
        offering.refresh_availability()
        self.uow.repositories.offerings.add(offering)
        log.info(
            "Created %s offering %s for publisher %s",
            claim.offering_type,
            offering.id,
            publisher.id,
        )
        return offering

    def _attach_offering(
        self, publisher: Publisher, website_id: UUID, offering: Offering
    ) -> UUID | None:
        """Point an open contact relationship at ``offering``, creating one when none is open.

        Returns the id of a newly created relationship.
        """

        relationship = self.resolver.find_offering_relationship(publisher.id, website_id)
        if relationship is not None:
            relationship.offering_id = offering.id
            relationship.touch()
            return None
        relationship = OfferingRelationship(
            publisher_id=publisher.id,
            website_id=website_id,
            offering_id=offering.id,
            contact_email=publisher.email,
            contact_name=self.publisher_claim.contact_name or publisher.contact_name,
            is_active=True,
        )
        self.uow.repositories.offering_relationships.add(relationship)
        return relationship.id

    def _update_offering(self, offering: Offering, claim: OfferingClaim, new_price: int) -> None:
        offering.base_price = new_price
        offering.currency = claim.currency or offering.currency
        offering.turnaround_days = claim.turnaround_days or offering.turnaround_days
        offering.min_word_count = claim.min_word_count or offering.min_word_count
        offering.max_word_count = claim.max_word_count or offering.max_word_count
        offering.merge_attributes(
            {
                "requirements": claim.requirements,
                "originalExtraction": dict(claim.original),
                "lastUpdated": utc_now().isoformat(),
            }
        )
        offering.refresh_availability()
        offering.touch()
        log.info("Updated %s offering %s to %s", claim.offering_type, offering.id, new_price)

    def record(self, outcome: _OfferingOutcome) -> None:
        manifest = self.manifest
        if outcome.offering_id is not None and outcome.kind is OfferingDecisionKind.CREATE:
            manifest.created.offering_ids.append(outcome.offering_id)
        if outcome.relationship_id is not None:
            manifest.created.relationship_ids.append(outcome.relationship_id)
        if outcome.updated and outcome.offering_id is not None:
            manifest.updated.offerings_updated.append(outcome.offering_id)
        if outcome.kind is OfferingDecisionKind.SKIP:
            manifest.skipped.duplicate_offerings += 1
        if outcome.conflict is not None:
            manifest.price_conflicts.append(outcome.conflict)
            if outcome.conflict.action is ConflictResolution.SKIPPED:
                manifest.skipped.price_conflicts += 1


def execute_plan(
    draft: Draft,
    payload: DraftPayload,
    *,
    uow: ReconciliationUnitOfWork,
    email_log: EmailLog | None,
    force_resolve_conflicts: bool = False,
    defaults: RegistryDefaults | None = None,
) -> ApprovalManifest:
    """Approve ``draft`` by writing ``payload`` to the registry, then commit.

    ``uow`` must already be entered. Raises a
    :class:`~pubrecon.domain.errors.ReconciliationError` subclass before any
    write when the draft cannot be approved.
    """

    ensure_transition(draft, DraftEvent.APPROVE)
    if not payload.has_offer:
        raise NoOfferError(draft.id)
    publisher_claim = payload.publisher
    email = normalize_email(payload.publisher_email)
    if publisher_claim is None or not email:
        raise MissingPublisherEmailError(draft.id)
    if not uow.repositories.drafts.claim_for_approval(draft.id):
        raise DraftAlreadyApprovedError(draft.id)

    run = _ApprovalRun(
        draft=draft,
        payload=payload,
        publisher_claim=publisher_claim,
        uow=uow,
        email_log=email_log,
        defaults=defaults or RegistryDefaults(),
        force_resolve_conflicts=force_resolve_conflicts,
        manifest=ApprovalManifest(draft_id=draft.id),
    )
    manifest = run.manifest
    log.info("Approving draft %s", draft.id)

    publisher = run.resolve_publisher(email)
    manifest.publisher_id = publisher.id

    website_ids: dict[str, UUID] = {}
    for domain, claim in distinct_website_claims(payload.websites):
        website_ids[domain] = run.resolve_website(domain, claim).id
    for website_id in website_ids.values():
        run.link_publisher_website(publisher, website_id)

    for offering_claim in payload.offerings:
        domain = normalize_domain(offering_claim.website_domain)
        if not domain:
            manifest.errors.append(
                f"Offering of type {offering_claim.offering_type} has no website domain"
            )
            continue
        website_id = website_ids.get(domain)
        if website_id is None:
            manifest.errors.append(
                f"Website {offering_claim.website_domain} not found for offering"
            )
            continue
        try:
            with uow.savepoint():
                outcome = run.apply_offering(publisher, offering_claim, domain, website_id)
        except PersistenceError as exc:
            log.warning(
                "Failed to apply %s offering on %s: %s", offering_claim.offering_type, domain, exc
            )
            manifest.errors.append(
                f"Failed to apply {offering_claim.offering_type} offering for {domain}: {exc}"
            )
            continue
        run.record(outcome)

    apply_event(draft, DraftEvent.APPROVE)
    draft.publisher_id = publisher.id
    draft.website_id = manifest.created.website_ids[0] if manifest.created.website_ids else None
    uow.commit()

    log.info(
        "Approved draft %s: %d websites created, %d offerings created, %d updated, "
        "%d duplicates, %d conflicts skipped, %d errors",
        draft.id,
        len(manifest.created.website_ids),
        len(manifest.created.offering_ids),
        len(manifest.updated.offerings_updated),
        manifest.skipped.duplicate_offerings,
        manifest.skipped.price_conflicts,
        len(manifest.errors),
    )
    return manifest
