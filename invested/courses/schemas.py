"""Pydantic schemas for the course catalog."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Course, Lesson


class CreateCourseRequest(BaseModel):
    """Request to create a course."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and reject blank titles."""
        v = v.strip()
        if not v:
            msg = "Title cannot be empty"
            raise ValueError(msg)
        return v


class CreateLessonRequest(BaseModel):
    """Request to add a lesson to a course."""

    title: str = Field(..., min_length=1, max_length=200)
    lesson_order: int = Field(..., ge=1)
    content: str | None = None
    video_url: str | None = Field(None, max_length=2000)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and reject blank titles."""
        v = v.strip()
        if not v:
            msg = "Title cannot be empty"
            raise ValueError(msg)
        return v


class CourseResponse(BaseModel):
    """Course details."""

    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    title: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, course: Course) -> "CourseResponse":
        return cls.model_validate(course)


class LessonResponse(BaseModel):
    """Lesson details."""

    model_config = ConfigDict(from_attributes=True)

    lesson_id: UUID
    course_id: UUID
    lesson_order: int
    title: str
    content: str | None = None
    video_url: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, lesson: Lesson) -> "LessonResponse":
        return cls.model_validate(lesson)


class LessonListResponse(BaseModel):
    """Ordered lessons of a course."""

    course_id: UUID
    items: list[LessonResponse]
    total: int
