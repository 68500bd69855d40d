"""Pydantic schemas for course progress.

Request and response models for:
- Course enrollment
- Lesson completion
- Progress queries
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import CompletionRecord, Enrollment
from .service import CourseProgress


# ==============================================================================
# Enrollment Schemas
# ==============================================================================


class EnrollmentResponse(BaseModel):
    """Enrollment with derived progress."""

    model_config = ConfigDict(from_attributes=True)

    enrollment_id: UUID
    user_id: UUID
    course_id: UUID
    enrolled_at: datetime
    progress_percent: int = Field(ge=0, le=100, description="0-100 percentage")
    is_completed: bool
    updated_at: datetime

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        return cls.model_validate(entity)


class EnrollmentListResponse(BaseModel):
    """A user's enrollments, most recent first."""

    items: list[EnrollmentResponse]
    total: int


# ==============================================================================
# Lesson Completion Schemas
# ==============================================================================


class CourseProgressResponse(BaseModel):
    """Progress after a lesson completion."""

    course_id: UUID
    lesson_id: UUID
    completed_lessons: int
    total_lessons: int
    progress_percent: int = Field(ge=0, le=100)
    is_completed: bool

    @classmethod
    def from_progress(cls, progress: CourseProgress) -> "CourseProgressResponse":
        return cls(
            course_id=progress.course_id,
            lesson_id=progress.lesson_id,
            completed_lessons=progress.completed_lessons,
            total_lessons=progress.total_lessons,
            progress_percent=progress.progress_percent,
            is_completed=progress.is_completed,
        )


class CompleteLessonResponse(BaseModel):
    """Response to a lesson completion."""

    message: str
    progress: CourseProgressResponse


class CompletedLessonResponse(BaseModel):
    """One completion ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    lesson_id: UUID
    completed_at: datetime


class CompletedLessonListResponse(BaseModel):
    """Lessons a user completed in a course."""

    course_id: UUID
    items: list[CompletedLessonResponse]
    total: int

    @classmethod
    def from_records(
        cls, course_id: UUID, records: list[CompletionRecord]
    ) -> "CompletedLessonListResponse":
        return cls(
            course_id=course_id,
            items=[CompletedLessonResponse.model_validate(r) for r in records],
            total=len(records),
        )
