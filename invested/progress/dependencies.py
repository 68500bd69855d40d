"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Progress service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ProgressError, ProgressErrorKind, ProgressService


async def get_progress_service(request: Request) -> ProgressService:
    """Get progress service from app state.

    Args:
        request: FastAPI request

    Returns:
        ProgressService instance
    """
    app_state = request.app.state
    if not getattr(app_state, "progress_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return app_state.progress_service


# Type alias for dependency injection
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]


_KIND_STATUS = {
    ProgressErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ProgressErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ProgressErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ProgressErrorKind.TRANSIENT: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def handle_progress_error(error: ProgressError) -> HTTPException:
    """Convert progress errors to HTTP exceptions.

    Args:
        error: Progress error

    Returns:
        HTTPException with appropriate status code
    """
    status_code = _KIND_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = None
    if error.kind is ProgressErrorKind.TRANSIENT:
        headers = {"Retry-After": "1"}

    return HTTPException(status_code=status_code, detail=error.message, headers=headers)
