"""
Pydantic schemas for the Blog API.

Defines request/response models with validation.
"""
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

PLACEHOLDER_IMAGE_URL = "./assets/images/blog/blog-placeholder.jpg"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostBase(BaseModel):
    """Base schema with common post fields."""
    model_config = ConfigDict(populate_by_name=True)

    title: StrictStr = Field(..., min_length=1)
    summary: StrictStr = Field(..., min_length=1)
    content: StrictStr = Field(..., min_length=1)
    image_url: StrictStr = Field(default=PLACEHOLDER_IMAGE_URL, alias="imageUrl")
    date: datetime = Field(default_factory=utcnow)

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC; aware ones are stored in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class PostCreate(PostBase):
    """Schema for creating a new post. Unknown fields are dropped."""
    pass


class BlogPost(PostBase):
    """Schema for stored posts and post responses."""
    id: str


class MessageResponse(BaseModel):
    message: str


class LivenessResponse(BaseModel):
    activeStatus: bool = True
    error: bool = False


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    service: str = "blog"
    database: Literal["connected", "disconnected"]
