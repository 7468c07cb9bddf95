"""
DinerVisit - one confirmed diner visit to a restaurant. Never mutated.

visit_day is the visit's local calendar day (settings.TIMEZONE). The unique
constraint on (diner_id, restaurant_id, visit_day) backs up the 24-hour
visit rule at the DB level. On ordinary days two visits on the same local
day are less than 24 hours apart, so a legitimate visit never collides.
The exception is a 25-hour daylight-saving fall-back day when TIMEZONE is
not UTC: a second visit more than 24 hours after the first but on the same
local day is rejected with the duplicate-visit reason.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class DinerVisit(Base):
    __tablename__ = "diner_visits"
    __table_args__ = (
        UniqueConstraint("diner_id", "restaurant_id", "visit_day", name="uq_diner_visit_restaurant_day"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    diner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("diner_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    restaurant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    visit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    visit_day: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
