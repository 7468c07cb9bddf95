"""
DinerPoints - the point ledger. One row per awarded diner action per period.

Append-only. source_id is the dedup key ("visit:<id>", "review:<id>"); the
unique constraint on (diner_id, source_id) makes awards idempotent under
retries.
"""
from datetime import datetime
import enum

from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class EarnedFrom(str, enum.Enum):
    visit = "visit"
    review = "review"


class DinerPoints(Base):
    __tablename__ = "diner_points"
    __table_args__ = (
        UniqueConstraint("diner_id", "source_id", name="uq_diner_points_source"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    diner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("diner_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    leaderboard_period_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leaderboard_periods.id", ondelete="CASCADE"), nullable=False, index=True
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    earned_from: Mapped[str] = mapped_column(
        Enum(EarnedFrom, name="earned_from_enum"), nullable=False
    )
    restaurant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_id: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
