"""review soft delete and winner history

Revision ID: 0004
Revises: 0003
Create Date: 2026-10-19

Deleted reviews are kept (deleted_at) so they still count toward the review
cooldown and daily cap. Closed periods record the winner's points and when
the winner saw the win notification.
"""
from alembic import op
import sqlalchemy as sa

revision = "0004"
down_revision = "0003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("diner_reviews", sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("leaderboard_periods", sa.Column("winner_points", sa.Integer(), nullable=True))
    op.add_column(
        "leaderboard_periods",
        sa.Column("winner_seen_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_leaderboard_periods_winner_diner_id",
        "leaderboard_periods",
        ["winner_diner_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_leaderboard_periods_winner_diner_id", table_name="leaderboard_periods")
    op.drop_column("leaderboard_periods", "winner_seen_at")
    op.drop_column("leaderboard_periods", "winner_points")
    op.drop_column("diner_reviews", "deleted_at")
