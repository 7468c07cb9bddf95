"""add leaderboard periods and point ledger

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-05

Weekly competition periods plus the diner_points ledger. The unique
constraint (diner_id, source_id) makes point awards idempotent.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    period_status_enum = sa.Enum("active", "closed", name="period_status_enum")
    period_status_enum.create(op.get_bind(), checkfirst=True)
    earned_from_enum = sa.Enum("visit", "review", name="earned_from_enum")
    earned_from_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "leaderboard_periods",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "closed", name="period_status_enum", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "winner_diner_id",
            sa.Integer(),
            sa.ForeignKey("diner_profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_leaderboard_periods_id", "leaderboard_periods", ["id"])
    op.create_index("ix_leaderboard_periods_start_date", "leaderboard_periods", ["start_date"])
    op.create_index("ix_leaderboard_periods_status", "leaderboard_periods", ["status"])
    # At most one active period
    op.create_index(
        "uq_leaderboard_periods_one_active",
        "leaderboard_periods",
        ["status"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "diner_points",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "diner_id",
            sa.Integer(),
            sa.ForeignKey("diner_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "leaderboard_period_id",
            sa.Integer(),
            sa.ForeignKey("leaderboard_periods.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column(
            "earned_from",
            sa.Enum("visit", "review", name="earned_from_enum", create_type=False),
            nullable=False,
        ),
        sa.Column("restaurant_id", sa.String(64), nullable=True),
        sa.Column("source_id", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_diner_points_id", "diner_points", ["id"])
    op.create_index("ix_diner_points_diner_id", "diner_points", ["diner_id"])
    op.create_index("ix_diner_points_leaderboard_period_id", "diner_points", ["leaderboard_period_id"])
    op.create_unique_constraint(
        "uq_diner_points_source",
        "diner_points",
        ["diner_id", "source_id"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_diner_points_source", "diner_points", type_="unique")
    op.drop_table("diner_points")
    op.drop_index("uq_leaderboard_periods_one_active", table_name="leaderboard_periods")
    op.drop_table("leaderboard_periods")
    sa.Enum(name="earned_from_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="period_status_enum").drop(op.get_bind(), checkfirst=True)
