"""
DevCamper API — Course Schemas
===============================
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from devcamper.schemas.common import RequestModel

MinimumSkill = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(RequestModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    weeks: str = Field(min_length=1, max_length=20)
    tuition: float = Field(ge=0)
    minimum_skill: MinimumSkill
    scholarship_available: bool = False


class CourseUpdate(RequestModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[str] = Field(default=None, min_length=1, max_length=20)
    tuition: Optional[float] = Field(default=None, ge=0)
    minimum_skill: Optional[MinimumSkill] = None
    scholarship_available: Optional[bool] = None


class BootcampSummary(BaseModel):
    """Parent bootcamp as embedded in course and review detail responses."""

    id: uuid.UUID
    name: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class CourseResponse(BaseModel):
    id: uuid.UUID
    bootcamp_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str
    weeks: str
    tuition: float
    minimum_skill: str
    scholarship_available: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CourseDetail(CourseResponse):
    """Only built from rows whose `bootcamp` relationship was eager-loaded."""

    bootcamp: BootcampSummary
