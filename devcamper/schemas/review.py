"""
DevCamper API — Review Schemas
===============================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from devcamper.schemas.common import RequestModel
from devcamper.schemas.course import BootcampSummary


class ReviewCreate(RequestModel):
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1)
    rating: int = Field(ge=1, le=10)


class ReviewUpdate(RequestModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = Field(default=None, min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=10)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    bootcamp_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    text: str
    rating: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewDetail(ReviewResponse):
    bootcamp: BootcampSummary
