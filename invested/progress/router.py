"""Course progress API endpoints.

Provides routes for:
- Course enrollment
- Lesson completion
- Progress queries
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from invested.auth.dependencies import MemberUser

from .dependencies import ProgressServiceDep, handle_progress_error
from .schemas import (
    CompletedLessonListResponse,
    CompleteLessonResponse,
    CourseProgressResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
)
from .service import ProgressError


router = APIRouter(tags=["progress"])
enrollments_router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


# ==============================================================================
# Enrollment Endpoints
# ==============================================================================


@router.post(
    "/v1/courses/{course_id}/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: MemberUser,
) -> EnrollmentResponse:
    """Enroll the current user in a course."""
    try:
        enrollment = await progress_service.enroll(user.id, course_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return EnrollmentResponse.from_entity(enrollment)


# ==============================================================================
# Lesson Completion Endpoints
# ==============================================================================


@router.post(
    "/v1/lessons/{lesson_id}/complete",
    response_model=CompleteLessonResponse,
    summary="Mark lesson as completed",
)
async def complete_lesson(
    lesson_id: UUID,
    progress_service: ProgressServiceDep,
    user: MemberUser,
) -> CompleteLessonResponse:
    """Mark a lesson as completed and return the recomputed course progress."""
    try:
        progress = await progress_service.complete_lesson(user.id, lesson_id)
    except ProgressError as e:
        raise handle_progress_error(e) from e

    return CompleteLessonResponse(
        message="Lesson marked as completed",
        progress=CourseProgressResponse.from_progress(progress),
    )


# ==============================================================================
# Enrollment Queries
# ==============================================================================


@enrollments_router.get(
    "/my",
    response_model=EnrollmentListResponse,
    summary="List my enrollments",
)
async def list_my_enrollments(
    progress_service: ProgressServiceDep,
    user: MemberUser,
) -> EnrollmentListResponse:
    """List the current user's enrollments, most recent first."""
    enrollments = await progress_service.list_enrollments(user.id)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )


@enrollments_router.get(
    "/{course_id}",
    response_model=EnrollmentResponse,
    summary="Get my enrollment in a course",
)
async def get_enrollment(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: MemberUser,
) -> EnrollmentResponse:
    """Get the current user's enrollment and progress in a course."""
    enrollment = await progress_service.get_enrollment(user.id, course_id)
    if enrollment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )
    return EnrollmentResponse.from_entity(enrollment)


@enrollments_router.get(
    "/{course_id}/completed-lessons",
    response_model=CompletedLessonListResponse,
    summary="List completed lessons",
)
async def list_completed_lessons(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    user: MemberUser,
) -> CompletedLessonListResponse:
    """List the lessons the current user completed in a course."""
    records = await progress_service.list_completed_lessons(user.id, course_id)
    return CompletedLessonListResponse.from_records(course_id, records)
