from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class DinerReview(Base):
    """A diner's review of a restaurant, optionally of one menu item."""

    __tablename__ = "diner_reviews"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    diner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("diner_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    restaurant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    menu_item_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_urls: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Set once on creation; edits never re-award points
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    # Soft delete: the row keeps counting toward the review cooldown and daily cap
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
