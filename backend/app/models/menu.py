"""
SQLAlchemy model for the menus table.

Each row is one entry in the navigation sidebar. The sidebar only ever shows
active rows, in display_order.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Menu(Base):
    """A navigation sidebar entry."""

    __tablename__ = "menus"

    # Primary key - auto-incrementing integer
    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(100))

    # Route the entry links to (e.g., "/ai-debate")
    path: Mapped[str] = mapped_column(String(255))

    # Emoji or icon class name
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Lower numbers are shown first
    display_order: Mapped[int] = mapped_column(Integer, default=0, index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Menu name={self.name} path={self.path} order={self.display_order}>"
