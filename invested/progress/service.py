"""Course progress service layer.

Business logic for:
- Course enrollment management
- Lesson completion with transactional progress recalculation
- Progress queries
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID, uuid4

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invested.core.database import utcnow
from invested.courses.models import Course, Lesson

from .models import CompletionRecord, Enrollment


logger = structlog.get_logger(__name__)

# PostgreSQL serialization_failure / deadlock_detected
TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ProgressErrorKind(str, Enum):
    """Failure taxonomy surfaced by the progress engine."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    TRANSIENT = "transient"


class ProgressError(Exception):
    """Base progress error."""

    kind: ProgressErrorKind | None = None

    def __init__(self, message: str, code: str = "progress_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class LessonNotFoundError(ProgressError):
    """Lesson does not exist."""

    kind = ProgressErrorKind.NOT_FOUND

    def __init__(self, message: str = "Lesson not found"):
        super().__init__(message, "lesson_not_found")


class CourseNotFoundError(ProgressError):
    """Course does not exist."""

    kind = ProgressErrorKind.NOT_FOUND

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class NotEnrolledError(ProgressError):
    """User not enrolled in the lesson's course."""

    kind = ProgressErrorKind.FORBIDDEN

    def __init__(self, message: str = "You are not enrolled in this course"):
        super().__init__(message, "not_enrolled")


class LessonAlreadyCompletedError(ProgressError):
    """Lesson already in the user's completion ledger."""

    kind = ProgressErrorKind.CONFLICT

    def __init__(self, message: str = "Lesson already completed"):
        super().__init__(message, "lesson_already_completed")


class AlreadyEnrolledError(ProgressError):
    """User already enrolled."""

    kind = ProgressErrorKind.CONFLICT

    def __init__(self, message: str = "You are already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class ProgressUnavailableError(ProgressError):
    """Storage failed for infrastructure reasons; nothing was committed."""

    kind = ProgressErrorKind.TRANSIENT

    def __init__(self, message: str = "Progress storage temporarily unavailable"):
        super().__init__(message, "progress_unavailable")


def is_transient_error(error: Exception) -> bool:
    """Whether a storage exception is an infrastructure failure worth retrying."""
    if isinstance(error, (PoolTimeoutError, OSError)):
        return True
    if isinstance(error, IntegrityError):
        return False
    if isinstance(error, (OperationalError, InterfaceError)):
        return True
    if isinstance(error, DBAPIError):
        if error.connection_invalidated:
            return True
        sqlstate = getattr(error.orig, "sqlstate", None) or getattr(
            error.orig, "pgcode", None
        )
        return sqlstate in TRANSIENT_SQLSTATES
    return False


# ==============================================================================
# Progress Calculation
# ==============================================================================


def calculate_percentage(completed: int, total: int) -> int:
    """Completion percentage rounded half-up; 0 for a course without lessons."""
    if total <= 0:
        return 0
    percent = Decimal(100 * completed) / Decimal(total)
    return int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CourseProgress:
    """Progress of one learner in one course, as committed."""

    user_id: UUID
    course_id: UUID
    lesson_id: UUID
    completed_lessons: int
    total_lessons: int
    progress_percent: int
    is_completed: bool


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for enrollments and lesson completion."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ==========================================================================
    # Enrollment
    # ==========================================================================

    async def enroll(self, user_id: UUID, course_id: UUID) -> Enrollment:
        """Enroll a user in a course at 0% progress.

        Raises:
            CourseNotFoundError: If the course does not exist
            AlreadyEnrolledError: If the user is already enrolled
            ProgressUnavailableError: On storage failure
        """
        now = utcnow()
        enrollment = Enrollment(
            enrollment_id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            enrolled_at=now,
            progress_percent=0,
            is_completed=False,
            updated_at=now,
        )

        try:
            async with self.session_factory() as session, session.begin():
                if await session.get(Course, course_id) is None:
                    raise CourseNotFoundError
                session.add(enrollment)
                try:
                    await session.flush()
                except IntegrityError as e:
                    raise AlreadyEnrolledError from e
        except (DBAPIError, PoolTimeoutError, OSError) as e:
            if not is_transient_error(e):
                raise
            raise self._unavailable(e, "enroll", user_id) from e

        logger.info("user_enrolled", user_id=str(user_id), course_id=str(course_id))
        return enrollment

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        """Get a user's enrollment in a course."""
        stmt = select(Enrollment).where(
            Enrollment.user_id == user_id, Enrollment.course_id == course_id
        )
        async with self.session_factory() as session:
            return await session.scalar(stmt)

    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]:
        """Get all enrollments of a user, most recent first."""
        stmt = (
            select(Enrollment)
            .where(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.enrollment_id)
        )
        async with self.session_factory() as session:
            result = await session.scalars(stmt)
            return list(result.all())

    async def list_completed_lessons(
        self, user_id: UUID, course_id: UUID
    ) -> list[CompletionRecord]:
        """Get the ledger entries of a user for one course, in completion order."""
        stmt = (
            select(CompletionRecord)
            .join(Lesson, Lesson.lesson_id == CompletionRecord.lesson_id)
            .where(CompletionRecord.user_id == user_id, Lesson.course_id == course_id)
            .order_by(CompletionRecord.completed_at, Lesson.lesson_order)
        )
        async with self.session_factory() as session:
            result = await session.scalars(stmt)
            return list(result.all())

    # ==========================================================================
    # Lesson Completion
    # ==========================================================================

    async def complete_lesson(self, user_id: UUID, lesson_id: UUID) -> CourseProgress:
        """Record a lesson as completed and recompute course progress.

        Runs as one transaction. The enrollment row is locked before the
        ledger insert, so concurrent completions for the same course are
        applied one after the other and each recount sees the others'
        committed ledger rows.

        Raises:
            LessonNotFoundError: If the lesson does not exist
            NotEnrolledError: If the user is not enrolled in its course
            LessonAlreadyCompletedError: If the lesson is already in the ledger
            ProgressUnavailableError: On storage failure (nothing committed)
        """
        try:
            async with self.session_factory() as session, session.begin():
                lesson = await session.get(Lesson, lesson_id)
                if lesson is None:
                    raise LessonNotFoundError

                enrollment = await session.scalar(
                    select(Enrollment)
                    .where(
                        Enrollment.user_id == user_id,
                        Enrollment.course_id == lesson.course_id,
                    )
                    .with_for_update()
                )
                if enrollment is None:
                    raise NotEnrolledError

                session.add(
                    CompletionRecord(
                        completion_id=uuid4(),
                        user_id=user_id,
                        lesson_id=lesson_id,
                        completed_at=utcnow(),
                    )
                )
                try:
                    await session.flush()
                except IntegrityError as e:
                    logger.info(
                        "lesson_completion_conflict",
                        user_id=str(user_id),
                        lesson_id=str(lesson_id),
                    )
                    raise LessonAlreadyCompletedError from e

                completed, total = await self._count_lessons(
                    session, user_id, lesson.course_id
                )
                percent = calculate_percentage(completed, total)

                enrollment.progress_percent = percent
                enrollment.is_completed = percent == 100
                enrollment.updated_at = utcnow()

                progress = CourseProgress(
                    user_id=user_id,
                    course_id=lesson.course_id,
                    lesson_id=lesson_id,
                    completed_lessons=completed,
                    total_lessons=total,
                    progress_percent=percent,
                    is_completed=enrollment.is_completed,
                )
        except (DBAPIError, PoolTimeoutError, OSError) as e:
            if not is_transient_error(e):
                raise
            raise self._unavailable(e, "complete_lesson", user_id) from e

        logger.info(
            "lesson_completed",
            user_id=str(user_id),
            course_id=str(progress.course_id),
            lesson_id=str(lesson_id),
            completed_lessons=progress.completed_lessons,
            total_lessons=progress.total_lessons,
            progress_percent=progress.progress_percent,
            is_completed=progress.is_completed,
        )
        return progress

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    async def _count_lessons(
        session: AsyncSession, user_id: UUID, course_id: UUID
    ) -> tuple[int, int]:
        """Count (completed, total) lessons of a course straight from storage."""
        completed = await session.scalar(
            select(func.count())
            .select_from(CompletionRecord)
            .join(Lesson, Lesson.lesson_id == CompletionRecord.lesson_id)
            .where(CompletionRecord.user_id == user_id, Lesson.course_id == course_id)
        )
        total = await session.scalar(
            select(func.count())
            .select_from(Lesson)
            .where(Lesson.course_id == course_id)
        )
        return int(completed or 0), int(total or 0)

    @staticmethod
    def _unavailable(
        error: Exception, operation: str, user_id: UUID
    ) -> ProgressUnavailableError:
        logger.warning(
            "progress_storage_failure",
            operation=operation,
            user_id=str(user_id),
            error=str(error),
            error_type=type(error).__name__,
        )
        return ProgressUnavailableError()
