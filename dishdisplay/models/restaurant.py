from datetime import datetime
from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from dishdisplay.db.base import Base


class Restaurant(Base):
    """
    Display data for restaurants managed by the owner-facing app.

    Only the name is needed here (prize restaurant). Visits and reviews carry
    restaurant ids as opaque strings and never require a row in this table.
    """

    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
