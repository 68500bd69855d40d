"""Course catalog API endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from invested.auth.dependencies import AdminUser, MemberUser

from .dependencies import CatalogServiceDep, handle_course_error
from .schemas import (
    CourseResponse,
    CreateCourseRequest,
    CreateLessonRequest,
    LessonListResponse,
    LessonResponse,
)
from .service import CourseError


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    catalog: CatalogServiceDep,
    user: AdminUser,
) -> CourseResponse:
    """Create a new course (admin only)."""
    course = await catalog.create_course(data, creator_id=user.id)
    return CourseResponse.from_entity(course)


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course",
)
async def get_course(
    course_id: UUID,
    catalog: CatalogServiceDep,
    _user: MemberUser,
) -> CourseResponse:
    """Get a single course."""
    course = await catalog.get_course(course_id)
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )
    return CourseResponse.from_entity(course)


@router.post(
    "/{course_id}/lessons",
    response_model=LessonResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add lesson to course",
)
async def create_lesson(
    course_id: UUID,
    data: CreateLessonRequest,
    catalog: CatalogServiceDep,
    _user: AdminUser,
) -> LessonResponse:
    """Add a lesson at a given position (admin only)."""
    try:
        lesson = await catalog.create_lesson(course_id, data)
    except CourseError as e:
        raise handle_course_error(e) from e
    return LessonResponse.from_entity(lesson)


@router.get(
    "/{course_id}/lessons",
    response_model=LessonListResponse,
    summary="List course lessons",
)
async def list_lessons(
    course_id: UUID,
    catalog: CatalogServiceDep,
    _user: MemberUser,
) -> LessonListResponse:
    """List the lessons of a course in order."""
    lessons = await catalog.list_lessons(course_id)
    return LessonListResponse(
        course_id=course_id,
        items=[LessonResponse.from_entity(lesson) for lesson in lessons],
        total=len(lessons),
    )
