"""Tests for the course catalog service."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from invested.courses.schemas import CreateCourseRequest, CreateLessonRequest
from invested.courses.service import (
    CatalogService,
    CourseNotFoundError,
    LessonOrderExistsError,
)


class TestCourseSchemas:
    """Validation of authoring requests."""

    def test_title_is_stripped(self) -> None:
        assert CreateCourseRequest(title="  Bonds  ").title == "Bonds"

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateCourseRequest(title="   ")

    def test_lesson_order_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CreateLessonRequest(title="Intro", lesson_order=0)


class TestCatalogService:
    """Tests for courses and lessons."""

    @pytest.mark.asyncio
    async def test_create_and_get_course(self, catalog: CatalogService) -> None:
        creator = uuid4()
        course = await catalog.create_course(
            CreateCourseRequest(title="Stocks", description="Equity basics"),
            creator_id=creator,
        )

        stored = await catalog.get_course(course.course_id)

        assert stored is not None
        assert stored.title == "Stocks"
        assert stored.creator_id == creator
        assert stored.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing_course(self, catalog: CatalogService) -> None:
        assert await catalog.get_course(uuid4()) is None

    @pytest.mark.asyncio
    async def test_lessons_listed_in_order(self, catalog: CatalogService) -> None:
        course = await catalog.create_course(
            CreateCourseRequest(title="ETFs"), creator_id=uuid4()
        )
        for order in (3, 1, 2):
            await catalog.create_lesson(
                course.course_id,
                CreateLessonRequest(title=f"Part {order}", lesson_order=order),
            )

        lessons = await catalog.list_lessons(course.course_id)

        assert [lesson.lesson_order for lesson in lessons] == [1, 2, 3]
        assert all(lesson.course_id == course.course_id for lesson in lessons)

    @pytest.mark.asyncio
    async def test_get_lesson_knows_its_course(self, make_course, catalog) -> None:
        course, lessons = await make_course(1)

        lesson = await catalog.get_lesson(lessons[0].lesson_id)

        assert lesson is not None
        assert lesson.course_id == course.course_id

    @pytest.mark.asyncio
    async def test_duplicate_order_rejected(self, make_course, catalog) -> None:
        course, _ = await make_course(2)

        with pytest.raises(LessonOrderExistsError):
            await catalog.create_lesson(
                course.course_id, CreateLessonRequest(title="Dup", lesson_order=2)
            )

        assert len(await catalog.list_lessons(course.course_id)) == 2

    @pytest.mark.asyncio
    async def test_lesson_for_missing_course(self, catalog: CatalogService) -> None:
        with pytest.raises(CourseNotFoundError):
            await catalog.create_lesson(
                uuid4(), CreateLessonRequest(title="Orphan", lesson_order=1)
            )
