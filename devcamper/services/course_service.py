"""
DevCamper API — Course Service
===============================

What:  Course CRUD scoped to bootcamps, plus the bootcamp's `average_cost`.

Ownership:
    add     → checked against the parent bootcamp's owner
    update  → checked against the course's own `user_id`
    delete  → same as update

After every insert, update or delete the parent's average cost is
recomputed as ceil(mean(tuition) / 10) * 10, or NULL with no courses left.
"""

import logging
import math
import uuid
from typing import Any, List

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.schemas.course import CourseCreate, CourseUpdate
from devcamper.services.access_policy import ensure_owner_or_admin
from devcamper.services.query_service import ListQuery, PageResult, fetch_page, filterable_columns

logger = logging.getLogger(__name__)


async def refresh_average_cost(db: AsyncSession, bootcamp_id: uuid.UUID) -> None:
    mean = await db.scalar(select(func.avg(Course.tuition)).where(Course.bootcamp_id == bootcamp_id))
    average = math.ceil(mean / 10) * 10 if mean is not None else None
    await db.execute(update(Bootcamp).where(Bootcamp.id == bootcamp_id).values(average_cost=average))


class CourseService:
    columns = filterable_columns(Course)

    async def get_or_404(self, db: AsyncSession, course_id: uuid.UUID) -> Course:
        course = await db.get(Course, course_id)
        if course is None:
            raise NotFoundError(resource="Course", resource_id=course_id)
        return course

    async def list_courses(self, db: AsyncSession, query: ListQuery) -> PageResult:
        return await fetch_page(
            db, Course, query, self.columns, options=[selectinload(Course.bootcamp)]
        )

    async def list_for_bootcamp(self, db: AsyncSession, bootcamp_id: uuid.UUID) -> List[Course]:
        result = await db.execute(
            select(Course).where(Course.bootcamp_id == bootcamp_id).order_by(Course.created_at)
        )
        return list(result.scalars().all())

    async def get_course(self, db: AsyncSession, course_id: uuid.UUID) -> Course:
        result = await db.execute(
            select(Course).where(Course.id == course_id).options(selectinload(Course.bootcamp))
        )
        course = result.scalar_one_or_none()
        if course is None:
            raise NotFoundError(resource="Course", resource_id=course_id)
        return course

    async def add_course(
        self, db: AsyncSession, user: Any, bootcamp_id: uuid.UUID, payload: CourseCreate
    ) -> Course:
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="Bootcamp", resource_id=bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "add a course to", f"bootcamp {bootcamp.id}")

        course = Course(**payload.model_dump(), bootcamp_id=bootcamp.id, user_id=user.id)
        db.add(course)
        await db.flush()
        await refresh_average_cost(db, bootcamp.id)
        await db.commit()
        logger.info("Course %s added to bootcamp %s by user %s", course.id, bootcamp.id, user.id)
        return course

    async def update_course(
        self, db: AsyncSession, user: Any, course_id: uuid.UUID, payload: CourseUpdate
    ) -> Course:
        course = await self.get_or_404(db, course_id)
        ensure_owner_or_admin(course.user_id, user, "update", f"course {course.id}")

        for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(course, key, value)
        await db.flush()
        await refresh_average_cost(db, course.bootcamp_id)
        await db.commit()
        return course

    async def delete_course(self, db: AsyncSession, user: Any, course_id: uuid.UUID) -> None:
        course = await self.get_or_404(db, course_id)
        ensure_owner_or_admin(course.user_id, user, "delete", f"course {course.id}")

        bootcamp_id = course.bootcamp_id
        await db.delete(course)
        await db.flush()
        await refresh_average_cost(db, bootcamp_id)
        await db.commit()
        logger.info("Course %s deleted by user %s", course_id, user.id)
