"""Initial schema: profiles, SK requests, officers, custom titles, history

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Tables added:
- profiles: Portal users with role and region
- sk_requests: Decree requests and their approval stamps
- officers: Roster entries of a request
- custom_role_titles: Chapter-specific role titles
- request_history: State transition audit trail
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the SK Portal tables."""

    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="regional_filer"),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
    )
    op.create_index("ix_profiles_role", "profiles", ["role"])
    op.create_index("ix_profiles_region", "profiles", ["region"])

    # --- sk_requests ---
    op.create_table(
        "sk_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("chapter_id", sa.Uuid(), nullable=False),
        sa.Column("meeting_date", sa.Date(), nullable=False),
        sa.Column("meeting_location", sa.String(255), nullable=False),
        sa.Column("meeting_report_key", sa.String(512), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="draft"),
        sa.Column("revision_note", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("verified_by", sa.Uuid(), nullable=True),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("tier1_approved_by", sa.Uuid(), nullable=True),
        sa.Column("tier1_approved_at", sa.DateTime(), nullable=True),
        sa.Column("tier2_approved_by", sa.Uuid(), nullable=True),
        sa.Column("tier2_approved_at", sa.DateTime(), nullable=True),
        sa.Column("decree_issued_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_sk_requests"),
        sa.ForeignKeyConstraint(["chapter_id"], ["profiles.id"], name="fk_sk_requests_chapter_id"),
        sa.ForeignKeyConstraint(["verified_by"], ["profiles.id"], name="fk_sk_requests_verified_by", ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["tier1_approved_by"], ["profiles.id"], name="fk_sk_requests_tier1_approved_by", ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["tier2_approved_by"], ["profiles.id"], name="fk_sk_requests_tier2_approved_by", ondelete="SET NULL"),
    )
    op.create_index("ix_sk_requests_chapter_id", "sk_requests", ["chapter_id"])
    op.create_index("ix_sk_requests_status", "sk_requests", ["status"])
    op.create_index("ix_sk_requests_created_at", "sk_requests", ["created_at"])
    op.create_index(
        "uq_sk_requests_active_chapter",
        "sk_requests",
        ["chapter_id"],
        unique=True,
        sqlite_where=sa.text("status <> 'decree_issued'"),
        postgresql_where=sa.text("status <> 'decree_issued'"),
    )

    # --- officers ---
    op.create_table(
        "officers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("request_id", sa.Uuid(), nullable=False),
        sa.Column("structure_category", sa.String(100), nullable=False),
        sa.Column("division", sa.String(255), nullable=True),
        sa.Column("role_title", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("id_document_key", sa.String(512), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_officers"),
        sa.ForeignKeyConstraint(["request_id"], ["sk_requests.id"], name="fk_officers_request_id", ondelete="CASCADE"),
        sa.UniqueConstraint("request_id", "position", name="uq_officers_request_position"),
    )
    op.create_index("ix_officers_request_id", "officers", ["request_id"])

    # --- custom_role_titles ---
    op.create_table(
        "custom_role_titles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("chapter_id", sa.Uuid(), nullable=False),
        sa.Column("structure_category", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_custom_role_titles"),
        sa.ForeignKeyConstraint(["chapter_id"], ["profiles.id"], name="fk_custom_role_titles_chapter_id", ondelete="CASCADE"),
        sa.UniqueConstraint("chapter_id", "structure_category", "title", name="uq_custom_role_titles"),
    )
    op.create_index("ix_custom_role_titles_chapter_id", "custom_role_titles", ["chapter_id"])

    # --- request_history ---
    op.create_table(
        "request_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("request_id", sa.Uuid(), nullable=False),
        sa.Column("from_status", sa.String(50), nullable=False),
        sa.Column("to_status", sa.String(50), nullable=False),
        sa.Column("decision", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("extra_data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_request_history"),
        sa.ForeignKeyConstraint(["request_id"], ["sk_requests.id"], name="fk_request_history_request_id", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["actor_id"], ["profiles.id"], name="fk_request_history_actor_id", ondelete="SET NULL"),
    )
    op.create_index("ix_request_history_request_id", "request_history", ["request_id"])
    op.create_index("ix_request_history_created_at", "request_history", ["created_at"])


def downgrade() -> None:
    """Drop the SK Portal tables."""
    op.drop_table("request_history")
    op.drop_table("custom_role_titles")
    op.drop_table("officers")
    op.drop_table("sk_requests")
    op.drop_table("profiles")
