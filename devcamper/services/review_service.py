"""
DevCamper API — Review Service
===============================

What:  Review CRUD and the bootcamp's `average_rating`.
Rules:
    - any authenticated `user` or `admin` may review an existing bootcamp
    - one review per user per bootcamp (unique constraint → 400)
    - only the author or an admin may update / delete (401 otherwise)
"""

import logging
import uuid
from typing import Any, List

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.review import Review
from devcamper.schemas.review import ReviewCreate, ReviewUpdate
from devcamper.services.access_policy import ensure_owner_or_admin
from devcamper.services.query_service import ListQuery, PageResult, fetch_page, filterable_columns

logger = logging.getLogger(__name__)


async def refresh_average_rating(db: AsyncSession, bootcamp_id: uuid.UUID) -> None:
    mean = await db.scalar(select(func.avg(Review.rating)).where(Review.bootcamp_id == bootcamp_id))
    average = float(mean) if mean is not None else None
    await db.execute(update(Bootcamp).where(Bootcamp.id == bootcamp_id).values(average_rating=average))


class ReviewService:
    columns = filterable_columns(Review)

    async def get_or_404(self, db: AsyncSession, review_id: uuid.UUID) -> Review:
        review = await db.get(Review, review_id)
        if review is None:
            raise NotFoundError(resource="Review", resource_id=review_id)
        return review

    async def list_reviews(self, db: AsyncSession, query: ListQuery) -> PageResult:
        return await fetch_page(
            db, Review, query, self.columns, options=[selectinload(Review.bootcamp)]
        )

    async def list_for_bootcamp(self, db: AsyncSession, bootcamp_id: uuid.UUID) -> List[Review]:
        result = await db.execute(
            select(Review).where(Review.bootcamp_id == bootcamp_id).order_by(Review.created_at)
        )
        return list(result.scalars().all())

    async def get_review(self, db: AsyncSession, review_id: uuid.UUID) -> Review:
        result = await db.execute(
            select(Review).where(Review.id == review_id).options(selectinload(Review.bootcamp))
        )
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundError(resource="Review", resource_id=review_id)
        return review

    async def add_review(
        self, db: AsyncSession, user: Any, bootcamp_id: uuid.UUID, payload: ReviewCreate
    ) -> Review:
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="Bootcamp", resource_id=bootcamp_id)

        review = Review(**payload.model_dump(), bootcamp_id=bootcamp.id, user_id=user.id)
        db.add(review)
        await db.flush()
        await refresh_average_rating(db, bootcamp.id)
        await db.commit()
        logger.info("Review %s added to bootcamp %s by user %s", review.id, bootcamp.id, user.id)
        return review

    async def update_review(
        self, db: AsyncSession, user: Any, review_id: uuid.UUID, payload: ReviewUpdate
    ) -> Review:
        review = await self.get_or_404(db, review_id)
        ensure_owner_or_admin(review.user_id, user, "update", f"review {review.id}")

        for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(review, key, value)
        await db.flush()
        await refresh_average_rating(db, review.bootcamp_id)
        await db.commit()
        return review

    async def delete_review(self, db: AsyncSession, user: Any, review_id: uuid.UUID) -> None:
        review = await self.get_or_404(db, review_id)
        ensure_owner_or_admin(review.user_id, user, "delete", f"review {review.id}")

        bootcamp_id = review.bootcamp_id
        await db.delete(review)
        await db.flush()
        await refresh_average_rating(db, bootcamp_id)
        await db.commit()
