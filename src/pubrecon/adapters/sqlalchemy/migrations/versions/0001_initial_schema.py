"""Initial registry and draft schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-09-14 10:12:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from pubrecon.adapters.sqlalchemy.mappings import JSONDictType, StringListType, UTCDateTime

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ACCOUNT_STATUS = sa.Enum(
    "shadow", "pending", "active", "suspended", name="accountstatus", native_enum=False
)
RECORD_STATUS = sa.Enum("pending", "active", "inactive", name="recordstatus", native_enum=False)
AVAILABILITY = sa.Enum(
    "available", "needs_info", "limited", "paused", name="availability", native_enum=False
)
DRAFT_STATUS = sa.Enum(
    "pending", "reviewing", "approved", "rejected", name="draftstatus", native_enum=False
)
RELATIONSHIP_TYPE = sa.Enum("contact", name="relationshiptype", native_enum=False)
VERIFICATION_STATUS = sa.Enum(
    "claimed", "verified", "contact", name="verificationstatus", native_enum=False
)


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "publisher",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("payment_email", sa.String(), nullable=True),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("account_status", ACCOUNT_STATUS, nullable=False),
        sa.Column("status", RECORD_STATUS, nullable=False),
        sa.Column("source", sa.String(), nullable=True),
        sa.Column("source_metadata", JSONDictType(), nullable=True),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_publisher")),
        sa.UniqueConstraint("email", name=op.f("uq_publisher_publisher_email")),
    )
    op.create_table(
        "website",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("domain", sa.String(), nullable=False),
        sa.Column("categories", StringListType(), nullable=False),
        sa.Column("niche", StringListType(), nullable=False),
        sa.Column("website_type", StringListType(), nullable=False),
        sa.Column("domain_rating", sa.Integer(), nullable=True),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column("status", RECORD_STATUS, nullable=False),
        sa.Column("source", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_website")),
        sa.UniqueConstraint("domain", name=op.f("uq_website_website_domain")),
    )
    op.create_table(
        "email_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email_from", sa.String(), nullable=True),
        sa.Column("campaign_id", sa.String(), nullable=True),
        sa.Column("raw_content", sa.Text(), nullable=True),
        sa.Column("html_content", sa.Text(), nullable=True),
        sa.Column("received_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_email_log")),
    )
    op.create_table(
        "offering",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("publisher_id", sa.Uuid(), nullable=False),
        sa.Column("offering_type", sa.String(), nullable=False),
        sa.Column("base_price", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("current_availability", AVAILABILITY, nullable=False),
        sa.Column("turnaround_days", sa.Integer(), nullable=True),
        sa.Column("min_word_count", sa.Integer(), nullable=True),
        sa.Column("max_word_count", sa.Integer(), nullable=True),
        sa.Column("languages", StringListType(), nullable=False),
        sa.Column("attributes", JSONDictType(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("source_email_id", sa.Uuid(), nullable=True),
        sa.Column("source_email_content", sa.Text(), nullable=True),
        sa.Column("pricing_extracted_from", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "base_price IS NULL OR base_price >= 0",
            name=op.f("ck_offering_base_price_non_negative"),
        ),
        sa.ForeignKeyConstraint(
            ["publisher_id"],
            ["publisher.id"],
            name=op.f("fk_offering_publisher_id_publisher"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_offering")),
    )
    op.create_index(
        "ix_offering_publisher_type", "offering", ["publisher_id", "offering_type"], unique=False
    )
    op.create_table(
        "publisher_website",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("publisher_id", sa.Uuid(), nullable=False),
        sa.Column("website_id", sa.Uuid(), nullable=False),
        sa.Column("status", RECORD_STATUS, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["publisher_id"],
            ["publisher.id"],
            name=op.f("fk_publisher_website_publisher_id_publisher"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["website_id"],
            ["website.id"],
            name=op.f("fk_publisher_website_website_id_website"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_publisher_website")),
        sa.UniqueConstraint(
            "publisher_id",
            "website_id",
            name=op.f("uq_publisher_website_publisher_website_publisher_id"),
        ),
    )
    op.create_table(
        "offering_relationship",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("publisher_id", sa.Uuid(), nullable=False),
        sa.Column("website_id", sa.Uuid(), nullable=False),
        sa.Column("offering_id", sa.Uuid(), nullable=True),
        sa.Column("relationship_type", RELATIONSHIP_TYPE, nullable=False),
        sa.Column("verification_status", VERIFICATION_STATUS, nullable=False),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["offering_id"],
            ["offering.id"],
            name=op.f("fk_offering_relationship_offering_id_offering"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["publisher_id"],
            ["publisher.id"],
            name=op.f("fk_offering_relationship_publisher_id_publisher"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["website_id"],
            ["website.id"],
            name=op.f("fk_offering_relationship_website_id_website"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_offering_relationship")),
        sa.UniqueConstraint(
            "publisher_id",
            "website_id",
            "offering_id",
            name=op.f("uq_offering_relationship_offering_relationship_publisher_id"),
        ),
    )
    op.create_table(
        "draft",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("parsed_payload", JSONDictType(), nullable=False),
        sa.Column("edited_payload", JSONDictType(), nullable=True),
        sa.Column("status", DRAFT_STATUS, nullable=False),
        sa.Column("email_log_id", sa.Uuid(), nullable=True),
        sa.Column("publisher_id", sa.Uuid(), nullable=True),
        sa.Column("website_id", sa.Uuid(), nullable=True),
        sa.Column("reviewed_at", UTCDateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["email_log_id"],
            ["email_log.id"],
            name=op.f("fk_draft_email_log_id_email_log"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["publisher_id"],
            ["publisher.id"],
            name=op.f("fk_draft_publisher_id_publisher"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["website_id"],
            ["website.id"],
            name=op.f("fk_draft_website_id_website"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draft")),
    )
    op.create_index("ix_draft_status", "draft", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_draft_status", table_name="draft")
    op.drop_table("draft")
    op.drop_table("offering_relationship")
    op.drop_table("publisher_website")
    op.drop_index("ix_offering_publisher_type", table_name="offering")
    op.drop_table("offering")
    op.drop_table("email_log")
    op.drop_table("website")
    op.drop_table("publisher")
