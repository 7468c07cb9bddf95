"""
LeaderboardPeriod - a Monday-Sunday competition week.

status values:
  "active" - points currently accrue to this period (at most one row)
  "closed" - finished; winner_diner_id holds the rank-1 diner, if any

winner_points is the winner's period total; winner_seen_at is set once the
winner has acknowledged the win notification.
"""
from datetime import datetime, date
import enum

from sqlalchemy import Integer, DateTime, Date, Enum, ForeignKey, Index, func, text
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class PeriodStatus(str, enum.Enum):
    active = "active"
    closed = "closed"


class LeaderboardPeriod(Base):
    __tablename__ = "leaderboard_periods"
    __table_args__ = (
        Index(
            "uq_leaderboard_periods_one_active",
            "status",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(PeriodStatus, name="period_status_enum"),
        nullable=False,
        default=PeriodStatus.active,
        index=True,
    )
    winner_diner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("diner_profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    winner_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winner_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
