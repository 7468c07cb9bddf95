"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-09-28 00:00:00.000000

Diner profiles, restaurants, visits and reviews.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- diner_profiles ---
    op.create_table(
        "diner_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=True),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_visits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_diner_profiles_id", "diner_profiles", ["id"])
    op.create_index("ix_diner_profiles_email", "diner_profiles", ["email"])

    # --- restaurants ---
    op.create_table(
        "restaurants",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- diner_visits ---
    op.create_table(
        "diner_visits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("diner_id", sa.Integer(), nullable=False),
        sa.Column("restaurant_id", sa.String(64), nullable=False),
        sa.Column("visit_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("visit_day", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["diner_id"], ["diner_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "diner_id", "restaurant_id", "visit_day", name="uq_diner_visit_restaurant_day"
        ),
    )
    op.create_index("ix_diner_visits_id", "diner_visits", ["id"])
    op.create_index("ix_diner_visits_diner_id", "diner_visits", ["diner_id"])
    op.create_index("ix_diner_visits_restaurant_id", "diner_visits", ["restaurant_id"])
    op.create_index("ix_diner_visits_visit_date", "diner_visits", ["visit_date"])

    # --- diner_reviews ---
    op.create_table(
        "diner_reviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("diner_id", sa.Integer(), nullable=False),
        sa.Column("restaurant_id", sa.String(64), nullable=False),
        sa.Column("menu_item_id", sa.String(64), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=True),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["diner_id"], ["diner_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_diner_reviews_rating"),
    )
    op.create_index("ix_diner_reviews_id", "diner_reviews", ["id"])
    op.create_index("ix_diner_reviews_diner_id", "diner_reviews", ["diner_id"])
    op.create_index("ix_diner_reviews_restaurant_id", "diner_reviews", ["restaurant_id"])
    op.create_index("ix_diner_reviews_created_at", "diner_reviews", ["created_at"])


def downgrade() -> None:
    op.drop_table("diner_reviews")
    op.drop_table("diner_visits")
    op.drop_table("restaurants")
    op.drop_table("diner_profiles")
