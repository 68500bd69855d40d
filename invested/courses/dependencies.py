"""FastAPI dependencies for the course catalog."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CatalogService, CourseError


async def get_catalog_service(request: Request) -> CatalogService:
    """Get catalog service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "catalog_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Course catalog not available",
        )
    return app_state.catalog_service


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


def handle_course_error(error: CourseError) -> HTTPException:
    """Convert course errors to HTTP exceptions."""
    status_map = {
        "course_not_found": status.HTTP_404_NOT_FOUND,
        "lesson_order_exists": status.HTTP_409_CONFLICT,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(status_code=status_code, detail=error.message)
