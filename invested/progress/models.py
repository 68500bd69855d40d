"""Database models for course progress tracking.

- Enrollments: one row per (learner, course) with the derived progress
- Lesson completions: the completion ledger, one row per (learner, lesson)

`progress_percent` and `is_completed` are never incremented; they are
rewritten from a fresh count of the ledger every time a lesson is
completed.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from invested.core.database.base import Base, UTCDateTime, utcnow


class Enrollment(Base):
    """A learner's registration in a course plus derived progress."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )

    enrollment_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, index=True)
    course_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True
    )
    enrolled_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    progress_percent: Mapped[int] = mapped_column(Integer, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<Enrollment user={self.user_id} course={self.course_id} "
            f"{self.progress_percent}%>"
        )


class CompletionRecord(Base):
    """Ledger entry: this learner completed this lesson. Never mutated."""

    __tablename__ = "lesson_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_completions_user_lesson"),
    )

    completion_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, index=True)
    lesson_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("lessons.lesson_id", ondelete="CASCADE"), index=True
    )
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<CompletionRecord user={self.user_id} lesson={self.lesson_id}>"
