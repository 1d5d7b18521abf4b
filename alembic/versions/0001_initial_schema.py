"""initial schema: participants, prizes, winners

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-01-10 09:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "participants",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("club", sa.String(length=100), nullable=False),
        sa.Column("zone", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=50), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_participants"),
    )
    op.create_index("ix_participants_zone_club", "participants", ["zone", "club"])

    op.create_table(
        "prizes",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=True),
        sa.Column("total_slots", sa.Integer(), nullable=False),
        sa.Column("sponsor", sa.String(length=100), nullable=True),
        sa.Column("sponsor_title", sa.String(length=50), nullable=True),
        sa.Column("scope", sa.String(length=20), nullable=False),
        sa.Column("zone", sa.String(length=50), nullable=True),
        sa.Column("club", sa.String(length=100), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total_slots >= 0", name="ck_prizes_total_slots_non_negative"),
        sa.CheckConstraint("scope IN ('district','zone','club')", name="ck_prizes_scope_enum"),
        sa.CheckConstraint(
            "(scope = 'district' AND zone IS NULL AND club IS NULL) OR "
            "(scope = 'zone' AND zone IS NOT NULL AND club IS NULL) OR "
            "(scope = 'club' AND club IS NOT NULL)",
            name="ck_prizes_scope_context_consistency",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_prizes"),
    )
    op.create_index("ix_prizes_context", "prizes", ["scope", "zone", "club"])

    op.create_table(
        "winners",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("participant_id", sa.String(length=64), nullable=False),
        sa.Column("participant_name", sa.String(length=100), nullable=False),
        sa.Column("participant_club", sa.String(length=100), nullable=False),
        sa.Column("participant_zone", sa.String(length=50), nullable=False),
        sa.Column("scope", sa.String(length=20), nullable=False),
        sa.Column("prize_id", sa.String(length=64), nullable=True),
        sa.Column("prize_name", sa.String(length=100), nullable=False),
        sa.Column("prize_item", sa.String(length=255), nullable=False),
        sa.Column("scope_context", sa.String(length=100), nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("scope IN ('district','zone','club')", name="ck_winners_scope_enum"),
        sa.ForeignKeyConstraint(
            ["prize_id"],
            ["prizes.id"],
            name="fk_winners_prize_id_prizes",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_winners"),
        sa.UniqueConstraint("scope", "participant_id", name="uq_winners_scope_participant"),
    )
    op.create_index("ix_winners_participant_id", "winners", ["participant_id"])
    op.create_index("ix_winners_prize_id", "winners", ["prize_id"])
    op.create_index("ix_winners_scope_context", "winners", ["scope", "scope_context"])


def downgrade() -> None:
    op.drop_index("ix_winners_scope_context", table_name="winners")
    op.drop_index("ix_winners_prize_id", table_name="winners")
    op.drop_index("ix_winners_participant_id", table_name="winners")
    op.drop_table("winners")
    op.drop_index("ix_prizes_context", table_name="prizes")
    op.drop_table("prizes")
    op.drop_index("ix_participants_zone_club", table_name="participants")
    op.drop_table("participants")
