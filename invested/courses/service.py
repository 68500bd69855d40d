"""Course catalog service layer.

Answers the two questions the progress tracker asks of the catalog:
which course owns a lesson, and which lessons a course has. Also
provides the admin write path used to author courses and lessons.
"""

from uuid import UUID, uuid4

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invested.core.database import utcnow

from .models import Course, Lesson
from .schemas import CreateCourseRequest, CreateLessonRequest


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CourseError(Exception):
    """Base course error."""

    def __init__(self, message: str, code: str = "course_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CourseNotFoundError(CourseError):
    """Course not found."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class LessonOrderExistsError(CourseError):
    """Another lesson already holds this position in the course."""

    def __init__(
        self, message: str = "A lesson with this order number already exists"
    ):
        super().__init__(message, "lesson_order_exists")


# ==============================================================================
# Catalog Service
# ==============================================================================


class CatalogService:
    """Service for courses and their ordered lessons."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ==========================================================================
    # Courses
    # ==========================================================================

    async def create_course(self, data: CreateCourseRequest, creator_id: UUID) -> Course:
        """Create a new course."""
        now = utcnow()
        course = Course(
            course_id=uuid4(),
            title=data.title,
            description=data.description,
            creator_id=creator_id,
            created_at=now,
            updated_at=now,
        )

        async with self.session_factory() as session, session.begin():
            session.add(course)

        logger.info("course_created", course_id=str(course.course_id))
        return course

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        async with self.session_factory() as session:
            return await session.get(Course, course_id)

    # ==========================================================================
    # Lessons
    # ==========================================================================

    async def create_lesson(self, course_id: UUID, data: CreateLessonRequest) -> Lesson:
        """Add a lesson to a course at the requested position.

        Raises:
            CourseNotFoundError: If the course does not exist
            LessonOrderExistsError: If the position is already taken
        """
        lesson = Lesson(
            lesson_id=uuid4(),
            course_id=course_id,
            lesson_order=data.lesson_order,
            title=data.title,
            content=data.content,
            video_url=data.video_url,
            created_at=utcnow(),
        )

        try:
            async with self.session_factory() as session, session.begin():
                if await session.get(Course, course_id) is None:
                    raise CourseNotFoundError
                session.add(lesson)
                await session.flush()
        except IntegrityError as e:
            logger.info(
                "lesson_order_taken",
                course_id=str(course_id),
                lesson_order=data.lesson_order,
            )
            raise LessonOrderExistsError from e

        logger.info(
            "lesson_created",
            course_id=str(course_id),
            lesson_id=str(lesson.lesson_id),
            lesson_order=lesson.lesson_order,
        )
        return lesson

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        """Get lesson (with its owning course) by ID."""
        async with self.session_factory() as session:
            return await session.get(Lesson, lesson_id)

    async def list_lessons(self, course_id: UUID) -> list[Lesson]:
        """Get the lessons of a course in order."""
        stmt = (
            select(Lesson)
            .where(Lesson.course_id == course_id)
            .order_by(Lesson.lesson_order)
        )
        async with self.session_factory() as session:
            result = await session.scalars(stmt)
            return list(result.all())
