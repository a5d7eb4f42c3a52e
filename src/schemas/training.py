"""Training course and course progress schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from utils.clock import utc_now


class TrainingCourseCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: int = Field(ge=1, description="Length of the course in minutes.")
    content: str = Field(min_length=1)
    is_required: bool = False


class TrainingCourse(TrainingCourseCreate):
    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProgressUpdateRequest(BaseModel):
    course_id: str
    progress: int = Field(ge=0, le=100, description="Percentage complete.")


class UserCourseProgress(BaseModel):
    """Progress of one user through one course; unique per (user_id, course_id)."""

    id: str
    user_id: str
    course_id: str
    progress: int = Field(ge=0, le=100)
    completed_at: Optional[datetime] = Field(
        default=None,
        description="Set exactly when progress reaches 100.",
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
