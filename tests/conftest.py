"""
DevCamper API — Test Configuration (conftest.py)
=================================================

What:  Shared fixtures for the whole suite.
How:   API tests run against a real app instance backed by a per-test SQLite
       file (aiosqlite). The geocoder and mailer are replaced by in-memory
       fakes on the AppContext so no network is touched.

Fixture Hierarchy (function-scoped):
    settings ─▶ app_context ─▶ app ─▶ client
                    │
                    ├── fake_geocoder
                    └── fake_mailer
    make_user: inserts a user with a role and returns its token headers
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Must be set before devcamper.main is imported (it builds a module-level app)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("FILE_UPLOAD_PATH", tempfile.mkdtemp(prefix="devcamper_test_"))
os.environ.setdefault("JWT_SECRET", "test-secret-not-real")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from devcamper.config import Settings  # noqa: E402
from devcamper.context import AppContext  # noqa: E402
from devcamper.database import Base  # noqa: E402
from devcamper.exceptions import MailDeliveryError  # noqa: E402
from devcamper.models.user import User  # noqa: E402
from devcamper.security import create_access_token, hash_password  # noqa: E402
from devcamper.services.geocoder import GeocodeResult  # noqa: E402

import devcamper.models  # noqa: E402,F401


# ══════════════════════════════════════════════════════════════════════════
# Fakes for external collaborators
# ══════════════════════════════════════════════════════════════════════════

BOSTON = GeocodeResult(
    latitude=42.3505,
    longitude=-71.1054,
    formatted_address="233 Bay State Rd, Boston, MA 02215, US",
    street="233 Bay State Rd",
    city="Boston",
    state="MA",
    zipcode="02215",
    country="US",
)

LOWELL = GeocodeResult(
    latitude=42.6334,
    longitude=-71.3162,
    formatted_address="1 University Ave, Lowell, MA 01854, US",
    street="1 University Ave",
    city="Lowell",
    state="MA",
    zipcode="01854",
    country="US",
)

LOS_ANGELES = GeocodeResult(
    latitude=34.0522,
    longitude=-118.2437,
    formatted_address="100 Main St, Los Angeles, CA 90012, US",
    street="100 Main St",
    city="Los Angeles",
    state="CA",
    zipcode="90012",
    country="US",
)


class FakeGeocoder:
    """Answers from a fixed table; unknown queries resolve to nothing."""

    def __init__(self):
        self.table: Dict[str, GeocodeResult] = {
            "233 Bay State Rd Boston MA 02215": BOSTON,
            "02215": BOSTON,
            "1 University Ave Lowell MA 01854": LOWELL,
            "100 Main St Los Angeles CA 90012": LOS_ANGELES,
        }
        self.queries: List[str] = []

    async def geocode(self, query: str) -> List[GeocodeResult]:
        self.queries.append(query)
        result = self.table.get(query)
        return [result] if result else []

    async def aclose(self) -> None:
        return None


@dataclass
class SentMessage:
    to: str
    subject: str
    text: str


class FakeMailer:
    def __init__(self):
        self.sent: List[SentMessage] = []
        self.fail = False

    async def send(self, to: str, subject: str, text: str) -> None:
        if self.fail:
            raise MailDeliveryError(context={"to": to})
        self.sent.append(SentMessage(to=to, subject=subject, text=text))


# ══════════════════════════════════════════════════════════════════════════
# Application fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        file_upload_path=str(tmp_path / "uploads"),
        max_file_upload=1000,
        jwt_secret="test-secret-not-real",
        log_level="WARNING",
        rate_limit_requests=10_000,
    )


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest_asyncio.fixture
async def app_context(settings, fake_geocoder, fake_mailer):
    ctx = AppContext.build(settings, geocoder=fake_geocoder, mailer=fake_mailer)
    async with ctx.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield ctx
    await ctx.aclose()


@pytest.fixture
def app(app_context):
    from devcamper.main import create_app

    return create_app(context=app_context)


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

        response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@dataclass
class AuthedUser:
    id: str
    email: str
    role: str
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def make_user(app_context):
    """
    Inserts a user directly and returns an AuthedUser carrying a valid token.

        publisher = await make_user("publisher")
        await client.post(url, json=body, headers=publisher.headers)
    """
    counter = {"n": 0}

    async def _make(role: str = "user", password: str = "123456") -> AuthedUser:
        counter["n"] += 1
        email = f"{role}{counter['n']}@example.com"
        async with app_context.session_factory() as session:
            user = User(
                name=f"{role.title()} {counter['n']}",
                email=email,
                role=role,
                password_hash=hash_password(password),
            )
            session.add(user)
            await session.commit()
            token = create_access_token(user.id, app_context.settings)
            return AuthedUser(id=str(user.id), email=email, role=role, token=token)

    return _make


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def bootcamp_payload():
    return {
        "name": "Devworks Bootcamp",
        "description": "Devworks is a full stack JavaScript bootcamp",
        "website": "https://devworks.com",
        "phone": "(111) 111-1111",
        "email": "enroll@devworks.com",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX", "Business"],
        "housing": True,
        "job_assistance": True,
        "job_guarantee": False,
        "accept_gi": True,
    }


@pytest.fixture
def course_payload():
    return {
        "title": "Front End Web Development",
        "description": "HTML, CSS and JavaScript fundamentals",
        "weeks": "8",
        "tuition": 8000,
        "minimum_skill": "beginner",
        "scholarship_available": True,
    }


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh upload directory per test."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)
