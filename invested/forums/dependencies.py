"""FastAPI dependencies for forums."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ForumError, ForumService


async def get_forum_service(request: Request) -> ForumService:
    """Get forum service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "forum_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Forum service not available",
        )
    return app_state.forum_service


ForumServiceDep = Annotated[ForumService, Depends(get_forum_service)]


def handle_forum_error(error: ForumError) -> HTTPException:
    """Convert forum errors to HTTP exceptions."""
    status_map = {
        "forum_not_found": status.HTTP_404_NOT_FOUND,
        "reply_not_found": status.HTTP_404_NOT_FOUND,
        "reply_parent_invalid": status.HTTP_400_BAD_REQUEST,
        "permission_denied": status.HTTP_403_FORBIDDEN,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(status_code=status_code, detail=error.message)
