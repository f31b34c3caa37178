"""
DevCamper API — Course Model
=============================

What:  ORM model for the `courses` table. A course belongs to one bootcamp
       and records the publisher who created it (`user_id`), which is the
       owner the Access Policy checks on update and delete.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bootcamp_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    weeks: Mapped[str] = mapped_column(String(20), nullable=False)
    tuition: Mapped[float] = mapped_column(Float, nullable=False)
    minimum_skill: Mapped[str] = mapped_column(String(20), nullable=False)
    scholarship_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    bootcamp: Mapped["Bootcamp"] = relationship(  # noqa: F821
        back_populates="courses", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', bootcamp_id={self.bootcamp_id})>"
