from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Boolean, DateTime, Date, func
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class DinerProfile(Base):
    """Aggregate identity of a diner across restaurants, keyed by email."""

    __tablename__ = "diner_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Profile-completion fields
    profile_photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    dietary_preferences: Mapped[str | None] = mapped_column(String(256), nullable=True)
    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    profile_bonus_awarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Lifetime counters; weekly competition points live in diner_points
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_visits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_visit_date: Mapped[date | None] = mapped_column(
        Date, nullable=True,
        comment="Local calendar day of the most recent visit to any restaurant",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
