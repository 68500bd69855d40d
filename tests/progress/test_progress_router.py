"""Tests for progress endpoints and error mapping."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from invested.progress.dependencies import handle_progress_error
from invested.progress.models import Enrollment
from invested.progress.service import (
    AlreadyEnrolledError,
    CourseProgress,
    LessonAlreadyCompletedError,
    LessonNotFoundError,
    NotEnrolledError,
    ProgressService,
    ProgressUnavailableError,
)


@pytest.fixture
def mock_progress_service(client: TestClient) -> Mock:
    service = Mock(spec=ProgressService)
    client.app.state.progress_service = service
    return service


class TestHandleProgressError:
    """Kind to HTTP status mapping."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (LessonNotFoundError(), status.HTTP_404_NOT_FOUND),
            (NotEnrolledError(), status.HTTP_403_FORBIDDEN),
            (LessonAlreadyCompletedError(), status.HTTP_409_CONFLICT),
            (AlreadyEnrolledError(), status.HTTP_409_CONFLICT),
            (ProgressUnavailableError(), status.HTTP_503_SERVICE_UNAVAILABLE),
        ],
    )
    def test_status(self, error, expected: int) -> None:
        exc = handle_progress_error(error)
        assert exc.status_code == expected
        assert exc.detail == error.message

    def test_transient_is_retryable(self) -> None:
        exc = handle_progress_error(ProgressUnavailableError())
        assert exc.headers == {"Retry-After": "1"}


class TestCompleteLessonEndpoint:
    """POST /v1/lessons/{lesson_id}/complete."""

    def test_success(self, client, mock_progress_service, member_headers, member_id) -> None:
        lesson_id, course_id = uuid4(), uuid4()
        mock_progress_service.complete_lesson = AsyncMock(
            return_value=CourseProgress(
                user_id=member_id,
                course_id=course_id,
                lesson_id=lesson_id,
                completed_lessons=1,
                total_lessons=4,
                progress_percent=25,
                is_completed=False,
            )
        )

        response = client.post(f"/v1/lessons/{lesson_id}/complete", headers=member_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Lesson marked as completed"
        assert data["progress"]["progress_percent"] == 25
        assert data["progress"]["is_completed"] is False
        mock_progress_service.complete_lesson.assert_awaited_once_with(member_id, lesson_id)

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (LessonNotFoundError(), 404),
            (NotEnrolledError(), 403),
            (LessonAlreadyCompletedError(), 409),
            (ProgressUnavailableError(), 503),
        ],
    )
    def test_errors(self, client, mock_progress_service, member_headers, error, expected) -> None:
        mock_progress_service.complete_lesson = AsyncMock(side_effect=error)

        response = client.post(f"/v1/lessons/{uuid4()}/complete", headers=member_headers)

        assert response.status_code == expected
        body = response.json()
        assert body["error"] is True
        assert body["message"] == error.message
        assert body["status_code"] == expected

    def test_requires_token(self, client, mock_progress_service) -> None:
        response = client.post(f"/v1/lessons/{uuid4()}/complete")
        assert response.status_code == 401

    def test_requires_membership(self, client, mock_progress_service, token_factory) -> None:
        headers = {"Authorization": f"Bearer {token_factory(membership='expired')}"}

        response = client.post(f"/v1/lessons/{uuid4()}/complete", headers=headers)

        assert response.status_code == 403
        mock_progress_service.complete_lesson.assert_not_called()

    def test_service_unavailable(self, client, member_headers) -> None:
        response = client.post(f"/v1/lessons/{uuid4()}/complete", headers=member_headers)
        assert response.status_code == 503


class TestEnrollmentEndpoints:
    """Enrollment creation and queries."""

    def _enrollment(self, user_id, course_id) -> Enrollment:
        now = datetime.now(UTC)
        return Enrollment(
            enrollment_id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            enrolled_at=now,
            progress_percent=0,
            is_completed=False,
            updated_at=now,
        )

    def test_enroll(self, client, mock_progress_service, member_headers, member_id) -> None:
        course_id = uuid4()
        mock_progress_service.enroll = AsyncMock(
            return_value=self._enrollment(member_id, course_id)
        )

        response = client.post(f"/v1/courses/{course_id}/enroll", headers=member_headers)

        assert response.status_code == 201
        assert response.json()["progress_percent"] == 0
        mock_progress_service.enroll.assert_awaited_once_with(member_id, course_id)

    def test_enroll_twice(self, client, mock_progress_service, member_headers) -> None:
        mock_progress_service.enroll = AsyncMock(side_effect=AlreadyEnrolledError())

        response = client.post(f"/v1/courses/{uuid4()}/enroll", headers=member_headers)

        assert response.status_code == 409

    def test_my_enrollments(self, client, mock_progress_service, member_headers, member_id) -> None:
        mock_progress_service.list_enrollments = AsyncMock(
            return_value=[self._enrollment(member_id, uuid4()) for _ in range(2)]
        )

        response = client.get("/v1/enrollments/my", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 2

    def test_missing_enrollment(self, client, mock_progress_service, member_headers) -> None:
        mock_progress_service.get_enrollment = AsyncMock(return_value=None)

        response = client.get(f"/v1/enrollments/{uuid4()}", headers=member_headers)

        assert response.status_code == 404
