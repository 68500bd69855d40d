"""Database models for the course catalog.

- Courses: Main course table
- Lessons: Ordered lessons, each owned by exactly one course

`lesson_order` is unique within a course (enforced by a table
constraint, so concurrent authors cannot claim the same position).
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invested.core.database.base import Base, UTCDateTime, utcnow


class Course(Base):
    """Course entity."""

    __tablename__ = "courses"

    course_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Course {self.course_id} {self.title!r}>"


class Lesson(Base):
    """Lesson entity. Immutable from the progress tracker's point of view."""

    __tablename__ = "lessons"
    __table_args__ = (
        UniqueConstraint("course_id", "lesson_order", name="uq_lessons_course_order"),
    )

    lesson_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    course_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True
    )
    lesson_order: Mapped[int] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Lesson {self.lesson_id} course={self.course_id} #{self.lesson_order}>"
