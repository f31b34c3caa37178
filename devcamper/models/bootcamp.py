"""
DevCamper API — Bootcamp Model
===============================

What:  ORM model for the `bootcamps` table.
Who:   BootcampService (CRUD, radius search, photo upload), course and
       review services (average cost / rating recomputation).

Location:
    The client submits a free-form `address`; it is geocoded and only the
    resolved location fields are stored. `latitude`/`longitude` are indexed
    together so the radius search can prefilter with a bounding box.

Derived columns:
    slug            — recomputed from `name`
    average_cost    — ceil(mean(course tuition) / 10) * 10
    average_rating  — mean(review rating)
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base

DEFAULT_PHOTO = "no-photo.jpg"


class Bootcamp(Base):
    __tablename__ = "bootcamps"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Geocoded location ─────────────────────────────────────────────────
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    formatted_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    careers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    photo: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_PHOTO)

    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Loaded explicitly with selectinload; lazy loading is unavailable in async sessions
    courses: Mapped[List["Course"]] = relationship(  # noqa: F821
        back_populates="bootcamp", lazy="raise", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_bootcamps_lat_lng", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<Bootcamp(id={self.id}, name='{self.name}', user_id={self.user_id})>"
