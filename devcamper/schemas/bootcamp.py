"""
DevCamper API — Bootcamp Schemas
=================================

What:  Request bodies for creating/updating bootcamps and the response shape.

Location in responses:
    Stored as flat columns; exposed as a nested object with GeoJSON-style
    `coordinates: [longitude, latitude]`.
"""

import re
import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from devcamper.schemas.common import RequestModel
from devcamper.schemas.course import CourseResponse

Career = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]

_URL_RE = re.compile(r"^https?://[\w\-]+(\.[\w\-]+)+[\w\-.,@?^=%&:/~+#]*$", re.IGNORECASE)


def _check_website(value: Optional[str]) -> Optional[str]:
    if value is not None and not _URL_RE.match(value):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


class BootcampCreate(RequestModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: str = Field(min_length=1)
    careers: List[Career] = Field(min_length=1)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        return _check_website(v)


class BootcampUpdate(RequestModel):
    """Partial update. `address`, when given, is geocoded again."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[List[Career]] = Field(default=None, min_length=1)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        return _check_website(v)


class Location(BaseModel):
    type: str = "Point"
    coordinates: List[float]
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


_BOOTCAMP_FIELDS = (
    "id", "user_id", "name", "slug", "description", "website", "phone", "email",
    "careers", "average_rating", "average_cost", "photo", "housing",
    "job_assistance", "job_guarantee", "accept_gi", "created_at",
)


class BootcampResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    location: Optional[Location] = None
    careers: List[str]
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _from_orm_row(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        values = {name: getattr(data, name) for name in _BOOTCAMP_FIELDS}
        if data.latitude is not None and data.longitude is not None:
            values["location"] = Location(
                coordinates=[data.longitude, data.latitude],
                formatted_address=data.formatted_address,
                street=data.street,
                city=data.city,
                state=data.state,
                zipcode=data.zipcode,
                country=data.country,
            )
        return cls._extra_fields(data, values)

    @classmethod
    def _extra_fields(cls, row: Any, values: dict) -> dict:
        return values


class BootcampWithCourses(BootcampResponse):
    """List representation: bootcamp plus its courses (eager-loaded)."""

    courses: List[CourseResponse] = Field(default_factory=list)

    @classmethod
    def _extra_fields(cls, row: Any, values: dict) -> dict:
        values["courses"] = [CourseResponse.model_validate(c) for c in row.courses]
        return values
