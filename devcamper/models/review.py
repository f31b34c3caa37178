"""
DevCamper API — Review Model
=============================

What:  ORM model for the `reviews` table.
Constraint: one review per (bootcamp, user); a second insert violates
`uq_reviews_bootcamp_user` and surfaces as DuplicateFieldError (400).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bootcamp_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    bootcamp: Mapped["Bootcamp"] = relationship(lazy="raise")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("bootcamp_id", "user_id", name="uq_reviews_bootcamp_user"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, rating={self.rating}, bootcamp_id={self.bootcamp_id})>"
