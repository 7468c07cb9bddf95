"""add visit streaks and profile completion

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-12

Streak counters on diner_profiles and visits, plus the four tracked
profile fields and the one-time completion bonus flag.
"""
from alembic import op
import sqlalchemy as sa

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("diner_profiles", sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"))
    op.add_column("diner_profiles", sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"))
    op.add_column("diner_profiles", sa.Column("last_visit_date", sa.Date(), nullable=True))
    op.add_column("diner_profiles", sa.Column("profile_photo_url", sa.String(1024), nullable=True))
    op.add_column("diner_profiles", sa.Column("bio", sa.Text(), nullable=True))
    op.add_column("diner_profiles", sa.Column("dietary_preferences", sa.String(256), nullable=True))
    op.add_column("diner_profiles", sa.Column("location", sa.String(256), nullable=True))
    op.add_column(
        "diner_profiles",
        sa.Column("profile_bonus_awarded", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.add_column("diner_visits", sa.Column("streak_bonus", sa.Integer(), nullable=False, server_default="0"))


def downgrade() -> None:
    op.drop_column("diner_visits", "streak_bonus")
    for column in (
        "profile_bonus_awarded",
        "location",
        "dietary_preferences",
        "bio",
        "profile_photo_url",
        "last_visit_date",
        "longest_streak",
        "current_streak",
    ):
        op.drop_column("diner_profiles", column)
