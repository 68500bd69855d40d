"""Forum API endpoints.

Provides routes for:
- Thread CRUD
- Reply CRUD (nested replies via parent_reply_id)
- Assembled reply tree of a thread
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from invested.auth.dependencies import MemberUser
from invested.config import get_settings

from .dependencies import ForumServiceDep, handle_forum_error
from .schemas import (
    CreateForumRequest,
    CreateReplyRequest,
    ForumListResponse,
    ForumResponse,
    MessageResponse,
    ReplyNodeResponse,
    ReplyResponse,
    ThreadResponse,
    UpdateForumRequest,
    UpdateReplyRequest,
    serialize_reply,
)
from .service import ForumError
from .threads import count_nodes, render_thread


router = APIRouter(prefix="/v1/forums", tags=["forums"])


# ==============================================================================
# Thread Endpoints
# ==============================================================================


@router.post(
    "",
    response_model=ForumResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create forum thread",
)
async def create_forum(
    data: CreateForumRequest,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> ForumResponse:
    """Open a new discussion thread."""
    forum = await forum_service.create_forum(user.id, data)
    return ForumResponse.from_entity(forum)


@router.get(
    "",
    response_model=ForumListResponse,
    summary="List forum threads",
)
async def list_forums(
    forum_service: ForumServiceDep,
    _user: MemberUser,
    limit: int | None = Query(None, ge=1, le=100, description="Threads per page"),
    offset: int = Query(0, ge=0),
) -> ForumListResponse:
    """List threads, newest first."""
    limit = limit or get_settings().forum_list_limit
    forums, total = await forum_service.list_forums(limit=limit, offset=offset)
    return ForumListResponse(
        items=[ForumResponse.from_entity(f) for f in forums],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{forum_id}",
    response_model=ForumResponse,
    summary="Get forum thread",
)
async def get_forum(
    forum_id: UUID,
    forum_service: ForumServiceDep,
    _user: MemberUser,
) -> ForumResponse:
    forum = await forum_service.get_forum(forum_id)
    if forum is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Forum thread not found",
        )
    return ForumResponse.from_entity(forum)


@router.put(
    "/{forum_id}",
    response_model=ForumResponse,
    summary="Update forum thread",
)
async def update_forum(
    forum_id: UUID,
    data: UpdateForumRequest,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> ForumResponse:
    """Edit a thread (author only)."""
    try:
        forum = await forum_service.update_forum(forum_id, user, data)
    except ForumError as e:
        raise handle_forum_error(e) from e
    return ForumResponse.from_entity(forum)


@router.delete(
    "/{forum_id}",
    response_model=MessageResponse,
    summary="Delete forum thread",
)
async def delete_forum(
    forum_id: UUID,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> MessageResponse:
    """Delete a thread and its replies (author or admin)."""
    try:
        await forum_service.delete_forum(forum_id, user)
    except ForumError as e:
        raise handle_forum_error(e) from e
    return MessageResponse(message="Forum thread deleted")


# ==============================================================================
# Reply Endpoints
# ==============================================================================


@router.get(
    "/{forum_id}/replies",
    response_model=ThreadResponse,
    summary="Get reply tree",
)
async def get_thread(
    forum_id: UUID,
    forum_service: ForumServiceDep,
    _user: MemberUser,
) -> ThreadResponse:
    """Get every reply of a thread, nested under the reply it answers."""
    try:
        forest = await forum_service.get_thread(forum_id)
    except ForumError as e:
        raise handle_forum_error(e) from e

    rendered = render_thread(
        forest,
        max_depth=get_settings().forum_max_render_depth,
        serialize=serialize_reply,
    )
    return ThreadResponse(
        forum_id=forum_id,
        total=count_nodes(forest),
        replies=[ReplyNodeResponse.model_validate(item) for item in rendered],
    )


@router.post(
    "/{forum_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post reply",
)
async def create_reply(
    forum_id: UUID,
    data: CreateReplyRequest,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> ReplyResponse:
    """Reply to a thread, or to a reply when parent_reply_id is given."""
    try:
        reply = await forum_service.create_reply(forum_id, user.id, data)
    except ForumError as e:
        raise handle_forum_error(e) from e
    return ReplyResponse.from_entity(reply)


@router.put(
    "/{forum_id}/replies/{reply_id}",
    response_model=ReplyResponse,
    summary="Update reply",
)
async def update_reply(
    forum_id: UUID,
    reply_id: UUID,
    data: UpdateReplyRequest,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> ReplyResponse:
    """Edit a reply (author only)."""
    try:
        reply = await forum_service.update_reply(forum_id, reply_id, user, data)
    except ForumError as e:
        raise handle_forum_error(e) from e
    return ReplyResponse.from_entity(reply)


@router.delete(
    "/{forum_id}/replies/{reply_id}",
    response_model=MessageResponse,
    summary="Delete reply",
)
async def delete_reply(
    forum_id: UUID,
    reply_id: UUID,
    forum_service: ForumServiceDep,
    user: MemberUser,
) -> MessageResponse:
    """Delete a reply (author or admin)."""
    try:
        await forum_service.delete_reply(forum_id, reply_id, user)
    except ForumError as e:
        raise handle_forum_error(e) from e
    return MessageResponse(message="Reply deleted")
