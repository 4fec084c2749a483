from __future__ import annotations

from pubrecon.domain.drafts import PublisherClaim, WebsiteClaim, merge_payloads


def test_merge_payloads_without_edits_copies_parsed() -> None:
    parsed = {"hasOffer": True, "offerings": []}

    merged = merge_payloads(parsed, None)

    assert merged == parsed
    assert merged is not parsed


def test_edited_keys_replace_parsed_keys_wholesale() -> None:
    parsed = {
        "hasOffer": True,
        "publisher": {"email": "a@x.com", "contactName": "A"},
        "websites": [{"domain": "x.com"}],
    }
    edited = {"publisher": {"email": "b@x.com"}}

    merged = merge_payloads(parsed, edited)

    assert merged["publisher"] == {"email": "b@x.com"}
    assert merged["websites"] == [{"domain": "x.com"}]


def test_publisher_claim_uses_first_payment_method() -> None:
    claim = PublisherClaim(email="a@x.com", payment_methods=("wise", "paypal"))

    assert claim.payment_method == "wise"
    assert claim.contact_fields()["payment_method"] == "wise"
    assert PublisherClaim().payment_method is None


def test_website_claim_niches_include_suggestions() -> None:
    claim = WebsiteClaim(domain="x.com", niche=("tech",), suggested_new_niches=("ai",))

    assert claim.all_niches == ["tech", "ai"]
