"""
DevCamper API — Bootcamp Service
=================================

What:  Bootcamp CRUD, radius search and photo upload.
How:   Every mutating method follows the same order:

           fetch (NotFoundError) → Access Policy → mutate → commit

       A failed commit raises inside the route, so the client gets an
       error response instead of a success for a lost write.

Orchestration (create):
    ┌──────────────┐   ┌───────────────┐   ┌──────────┐   ┌────────┐
    │ one-per-user │──▶│ geocode       │──▶│ slugify  │──▶│ insert │
    │ rule (400)   │   │ address (400) │   │ name     │   │        │
    └──────────────┘   └───────────────┘   └──────────┘   └────────┘

Deleting a bootcamp removes its courses and reviews in the same transaction.
"""

import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import BadRequestError, NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.schemas.bootcamp import BootcampCreate, BootcampUpdate
from devcamper.services import geo
from devcamper.services.access_policy import ensure_can_publish_bootcamp, ensure_owner_or_admin
from devcamper.services.file_service import PhotoStorage, PhotoUpload
from devcamper.services.geocoder import GeocodeResult, Geocoder
from devcamper.services.query_service import ListQuery, PageResult, fetch_page, filterable_columns

logger = logging.getLogger(__name__)

# Small pad so points on the exact box edge survive float rounding
_BOX_PAD_DEGREES = 1e-9


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "bootcamp"


def _location_fields(result: GeocodeResult) -> Dict[str, Any]:
    return {
        "latitude": result.latitude,
        "longitude": result.longitude,
        "formatted_address": result.formatted_address,
        "street": result.street,
        "city": result.city,
        "state": result.state,
        "zipcode": result.zipcode,
        "country": result.country,
    }


class BootcampService:
    """
    Args:
        geocoder: resolves addresses and zipcodes to coordinates
        photos:   validates and writes uploaded photos
    """

    columns = filterable_columns(Bootcamp)

    def __init__(self, geocoder: Geocoder, photos: PhotoStorage):
        self.geocoder = geocoder
        self.photos = photos

    async def get_or_404(self, db: AsyncSession, bootcamp_id: uuid.UUID) -> Bootcamp:
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="Bootcamp", resource_id=bootcamp_id)
        return bootcamp

    async def _resolve(self, query: str) -> GeocodeResult:
        results = await self.geocoder.geocode(query)
        if not results:
            raise BadRequestError(message=f"Could not geocode {query}", context={"query": query})
        return results[0]

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_bootcamps(self, db: AsyncSession, query: ListQuery) -> PageResult:
        return await fetch_page(
            db, Bootcamp, query, self.columns, options=[selectinload(Bootcamp.courses)]
        )

    async def get_bootcamp(self, db: AsyncSession, bootcamp_id: uuid.UUID) -> Bootcamp:
        return await self.get_or_404(db, bootcamp_id)

    async def find_in_radius(self, db: AsyncSession, zipcode: str, distance: float) -> List[Bootcamp]:
        """
        Bootcamps whose location lies within `distance` miles of `zipcode`.

        The store is prefiltered by the cap's bounding box; the exact
        spherical-cap test runs on the candidates.
        """
        center = await self._resolve(zipcode)
        radius = geo.angular_radius(distance)
        box = geo.bounding_box(center.latitude, center.longitude, radius)

        lat_cond = Bootcamp.latitude.between(box.min_lat - _BOX_PAD_DEGREES, box.max_lat + _BOX_PAD_DEGREES)
        if box.crosses_antimeridian:
            lng_cond = or_(
                Bootcamp.longitude >= box.min_lng - _BOX_PAD_DEGREES,
                Bootcamp.longitude <= box.max_lng + _BOX_PAD_DEGREES,
            )
        else:
            lng_cond = Bootcamp.longitude.between(
                box.min_lng - _BOX_PAD_DEGREES, box.max_lng + _BOX_PAD_DEGREES
            )

        result = await db.execute(select(Bootcamp).where(and_(lat_cond, lng_cond)))
        candidates = result.scalars().all()
        matches = [
            b for b in candidates
            if geo.within_cap(center.latitude, center.longitude, b.latitude, b.longitude, radius)
        ]
        logger.info(
            "Radius search %s/%s mi: %d candidate(s), %d match(es)",
            zipcode, distance, len(candidates), len(matches),
        )
        return matches

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_bootcamp(self, db: AsyncSession, user: Any, payload: BootcampCreate) -> Bootcamp:
        existing = await db.scalar(
            select(Bootcamp.id).where(Bootcamp.user_id == user.id).limit(1)
        )
        ensure_can_publish_bootcamp(existing, user)

        location = await self._resolve(payload.address)
        data = payload.model_dump(exclude={"address"})
        bootcamp = Bootcamp(
            **data,
            **_location_fields(location),
            slug=slugify(payload.name),
            user_id=user.id,
        )
        db.add(bootcamp)
        await db.commit()
        logger.info("Bootcamp created: %s by user %s", bootcamp.id, user.id)
        return bootcamp

    async def update_bootcamp(
        self, db: AsyncSession, user: Any, bootcamp_id: uuid.UUID, payload: BootcampUpdate
    ) -> Bootcamp:
        bootcamp = await self.get_or_404(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "update", "this bootcamp")

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        address = changes.pop("address", None)
        if address is not None:
            changes.update(_location_fields(await self._resolve(address)))
        if "name" in changes:
            changes["slug"] = slugify(changes["name"])

        for key, value in changes.items():
            setattr(bootcamp, key, value)
        await db.commit()
        logger.info("Bootcamp updated: %s by user %s (%s)", bootcamp.id, user.id, sorted(changes))
        return bootcamp

    async def delete_bootcamp(self, db: AsyncSession, user: Any, bootcamp_id: uuid.UUID) -> None:
        bootcamp = await self.get_or_404(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "delete", "this bootcamp")

        await db.execute(delete(Course).where(Course.bootcamp_id == bootcamp.id))
        await db.execute(delete(Review).where(Review.bootcamp_id == bootcamp.id))
        await db.delete(bootcamp)
        await db.commit()
        logger.info("Bootcamp deleted: %s by user %s", bootcamp_id, user.id)

    async def upload_photo(
        self,
        db: AsyncSession,
        user: Any,
        bootcamp_id: uuid.UUID,
        upload: Optional[PhotoUpload],
    ) -> str:
        """
        Stores the photo and records its name on the bootcamp.

        The row update is committed before returning, so the response is
        only sent once the new photo name is durable.
        Rejected uploads leave both the disk and the row untouched.
        """
        bootcamp = await self.get_or_404(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "update", "this bootcamp")

        name = await self.photos.validate_and_store(bootcamp.id, upload)
        bootcamp.photo = name
        await db.commit()
        return name
