"""
DevCamper API — Application Context
====================================

What:  Everything a request needs that outlives the request: settings, the
       database engine and session factory, the external collaborators
       (geocoder, mailer, photo storage) and the services built on them.
How:   Built once in the lifespan and stored on `app.state.context`; routes
       reach it through the `get_context` dependency. Tests build their own
       context and can swap the geocoder or mailer for fakes.

    AppContext
    ├── settings
    ├── engine / session_factory
    ├── geocoder ─┐
    ├── photos ───┼─▶ bootcamps
    ├── mailer ───┴─▶ auth
    ├── courses
    ├── reviews
    └── users
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from devcamper.config import Settings
from devcamper.database import build_engine, build_session_factory
from devcamper.services.auth_service import AuthService
from devcamper.services.bootcamp_service import BootcampService
from devcamper.services.course_service import CourseService
from devcamper.services.file_service import PhotoStorage
from devcamper.services.geocoder import Geocoder
from devcamper.services.mail_service import Mailer
from devcamper.services.review_service import ReviewService
from devcamper.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    geocoder: Geocoder
    mailer: Mailer
    photos: PhotoStorage
    bootcamps: BootcampService
    courses: CourseService
    reviews: ReviewService
    users: UserService
    auth: AuthService

    @classmethod
    def build(
        cls,
        settings: Settings,
        engine: Optional[AsyncEngine] = None,
        geocoder: Optional[Geocoder] = None,
        mailer: Optional[Mailer] = None,
    ) -> "AppContext":
        engine = engine or build_engine(settings)
        geocoder = geocoder or Geocoder(settings)
        mailer = mailer or Mailer(settings)
        photos = PhotoStorage(settings.file_upload_path, settings.max_file_upload)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            geocoder=geocoder,
            mailer=mailer,
            photos=photos,
            bootcamps=BootcampService(geocoder, photos),
            courses=CourseService(),
            reviews=ReviewService(),
            users=UserService(),
            auth=AuthService(settings, mailer),
        )

    async def aclose(self) -> None:
        await self.geocoder.aclose()
        await self.engine.dispose()
        logger.info("Application context closed")
