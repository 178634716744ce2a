"""Availability slots, meetings, match suggestions, and the read-only block/profile tables

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(JSONB, "postgresql")


def upgrade() -> None:
    op.create_table(
        "availability_slots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("slot_date", sa.String(10), nullable=False),
        sa.Column("time_of_day", sa.String(5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("state", sa.String(16), nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_availability_slots_owner_id", "availability_slots", ["owner_id"], unique=False)
    op.create_index(
        "ix_availability_slots_triple_state",
        "availability_slots",
        ["slot_date", "time_of_day", "duration_minutes", "state"],
        unique=False,
    )
    op.create_index("ix_availability_slots_owner_date", "availability_slots", ["owner_id", "slot_date"], unique=False)

    op.create_table(
        "meetings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("party_a_id", sa.String(64), nullable=False),
        sa.Column("party_b_id", sa.String(64), nullable=False),
        sa.Column("slot_a_id", sa.String(36), sa.ForeignKey("availability_slots.id"), nullable=False),
        sa.Column("slot_b_id", sa.String(36), sa.ForeignKey("availability_slots.id"), nullable=False),
        sa.Column("meeting_date", sa.String(10), nullable=False),
        sa.Column("meeting_time", sa.String(5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("compatibility_score", sa.Float(), nullable=True),
        sa.Column("compatibility_reasons", _JSON, nullable=True),
        sa.Column("state", sa.String(16), nullable=False, server_default="scheduled"),
        sa.Column("join_link", sa.String(512), nullable=False),
        sa.Column("closed_by", sa.String(64), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    for col in ("party_a_id", "party_b_id", "slot_a_id", "slot_b_id"):
        op.create_index(f"ix_meetings_{col}", "meetings", [col], unique=False)
    op.create_index("ix_meetings_date_time", "meetings", ["meeting_date", "meeting_time"], unique=False)

    op.create_table(
        "match_suggestions",
        sa.Column("slot_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("candidate_slot_id", sa.String(36), nullable=False),
        sa.Column("candidate_owner_id", sa.String(64), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("reasons", _JSON, nullable=True),
        sa.Column("computed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_match_suggestions_owner_id", "match_suggestions", ["owner_id"], unique=False)

    op.create_table(
        "user_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("blocker_id", sa.String(64), nullable=False),
        sa.Column("blocked_id", sa.String(64), nullable=False),
        sa.Column("reason", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blocks_pair"),
    )
    op.create_index("ix_user_blocks_blocker_id", "user_blocks", ["blocker_id"], unique=False)
    op.create_index("ix_user_blocks_blocked_id", "user_blocks", ["blocked_id"], unique=False)

    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("display_name", sa.String(128), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("stage", sa.String(32), nullable=True),
        sa.Column("summary", sa.String(2000), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("user_profiles")
    op.drop_table("user_blocks")
    op.drop_table("match_suggestions")
    op.drop_table("meetings")
    op.drop_table("availability_slots")
