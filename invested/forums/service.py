"""Forum service layer.

Business logic for:
- Thread CRUD with author/admin permissions
- Replies, optionally nested under another reply of the same thread
- Thread assembly for display
"""

from uuid import UUID, uuid4

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invested.auth.schemas import UserIdentity
from invested.core.database import utcnow

from .models import Forum, ForumReply
from .schemas import (
    CreateForumRequest,
    CreateReplyRequest,
    UpdateForumRequest,
    UpdateReplyRequest,
)
from .threads import ReplyNode, build_reply_tree


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ForumError(Exception):
    """Base forum error."""

    def __init__(self, message: str, code: str = "forum_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ForumNotFoundError(ForumError):
    """Forum thread not found."""

    def __init__(self, message: str = "Forum thread not found"):
        super().__init__(message, "forum_not_found")


class ReplyNotFoundError(ForumError):
    """Reply not found in this thread."""

    def __init__(self, message: str = "Reply not found"):
        super().__init__(message, "reply_not_found")


class ReplyParentInvalidError(ForumError):
    """Parent reply missing or in another thread."""

    def __init__(
        self, message: str = "Parent reply does not belong to this forum thread"
    ):
        super().__init__(message, "reply_parent_invalid")


class PermissionDeniedError(ForumError):
    """User may not modify this post."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


# ==============================================================================
# Forum Service
# ==============================================================================


class ForumService:
    """Service for forum threads and their replies."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ==========================================================================
    # Threads
    # ==========================================================================

    async def create_forum(self, author_id: UUID, data: CreateForumRequest) -> Forum:
        """Open a new thread."""
        now = utcnow()
        forum = Forum(
            forum_id=uuid4(),
            author_id=author_id,
            title=data.title,
            content=data.content,
            created_at=now,
            updated_at=now,
        )
        async with self.session_factory() as session, session.begin():
            session.add(forum)

        logger.info("forum_created", forum_id=str(forum.forum_id), author_id=str(author_id))
        return forum

    async def get_forum(self, forum_id: UUID) -> Forum | None:
        """Get thread by ID."""
        async with self.session_factory() as session:
            return await session.get(Forum, forum_id)

    async def list_forums(self, limit: int, offset: int = 0) -> tuple[list[Forum], int]:
        """List threads newest first.

        Returns:
            Tuple of (page of threads, total number of threads)
        """
        stmt = (
            select(Forum)
            .order_by(Forum.created_at.desc(), Forum.forum_id)
            .limit(limit)
            .offset(offset)
        )
        async with self.session_factory() as session:
            forums = list((await session.scalars(stmt)).all())
            total = await session.scalar(select(func.count()).select_from(Forum))
        return forums, int(total or 0)

    async def update_forum(
        self, forum_id: UUID, user: UserIdentity, data: UpdateForumRequest
    ) -> Forum:
        """Edit a thread. Only its author may do so.

        Raises:
            ForumNotFoundError: If the thread does not exist
            PermissionDeniedError: If the user is not the author
        """
        async with self.session_factory() as session, session.begin():
            forum = await session.get(Forum, forum_id)
            if forum is None:
                raise ForumNotFoundError
            if forum.author_id != user.id:
                raise PermissionDeniedError("You can only edit your own threads")

            if data.title is not None:
                forum.title = data.title
            if data.content is not None:
                forum.content = data.content
            forum.updated_at = utcnow()

        logger.info("forum_updated", forum_id=str(forum_id), user_id=str(user.id))
        return forum

    async def delete_forum(self, forum_id: UUID, user: UserIdentity) -> None:
        """Delete a thread and all of its replies (author or admin).

        Raises:
            ForumNotFoundError: If the thread does not exist
            PermissionDeniedError: If the user is neither author nor admin
        """
        async with self.session_factory() as session, session.begin():
            forum = await session.get(Forum, forum_id)
            if forum is None:
                raise ForumNotFoundError
            if forum.author_id != user.id and not user.is_admin:
                raise PermissionDeniedError("You can only delete your own threads")

            await session.execute(
                delete(ForumReply).where(ForumReply.forum_id == forum_id)
            )
            await session.delete(forum)

        logger.info(
            "forum_deleted",
            forum_id=str(forum_id),
            user_id=str(user.id),
            by_admin=forum.author_id != user.id,
        )

    # ==========================================================================
    # Replies
    # ==========================================================================

    async def create_reply(
        self, forum_id: UUID, author_id: UUID, data: CreateReplyRequest
    ) -> ForumReply:
        """Post a reply to a thread, or to another reply in the same thread.

        Raises:
            ForumNotFoundError: If the thread does not exist
            ReplyParentInvalidError: If the parent is missing or elsewhere
        """
        now = utcnow()
        reply = ForumReply(
            reply_id=uuid4(),
            forum_id=forum_id,
            author_id=author_id,
            content=data.content,
            parent_reply_id=data.parent_reply_id,
            created_at=now,
            updated_at=now,
        )

        async with self.session_factory() as session, session.begin():
            if await session.get(Forum, forum_id) is None:
                raise ForumNotFoundError

            if data.parent_reply_id is not None:
                parent = await session.get(ForumReply, data.parent_reply_id)
                if parent is None or parent.forum_id != forum_id:
                    logger.warning(
                        "reply_parent_rejected",
                        forum_id=str(forum_id),
                        parent_reply_id=str(data.parent_reply_id),
                    )
                    raise ReplyParentInvalidError

            session.add(reply)

        logger.info(
            "reply_created",
            forum_id=str(forum_id),
            reply_id=str(reply.reply_id),
            parent_reply_id=str(reply.parent_reply_id) if reply.parent_reply_id else None,
        )
        return reply

    async def update_reply(
        self,
        forum_id: UUID,
        reply_id: UUID,
        user: UserIdentity,
        data: UpdateReplyRequest,
    ) -> ForumReply:
        """Edit a reply's content. Only its author may do so."""
        async with self.session_factory() as session, session.begin():
            reply = await self._get_thread_reply(session, forum_id, reply_id)
            if reply.author_id != user.id:
                raise PermissionDeniedError("You can only edit your own replies")

            reply.content = data.content
            reply.updated_at = utcnow()

        logger.info("reply_updated", reply_id=str(reply_id), user_id=str(user.id))
        return reply

    async def delete_reply(
        self, forum_id: UUID, reply_id: UUID, user: UserIdentity
    ) -> None:
        """Delete a reply (author or admin).

        Answers to the deleted reply are kept; they become top-level posts.
        """
        async with self.session_factory() as session, session.begin():
            reply = await self._get_thread_reply(session, forum_id, reply_id)
            if reply.author_id != user.id and not user.is_admin:
                raise PermissionDeniedError("You can only delete your own replies")
            await session.delete(reply)

        logger.info("reply_deleted", reply_id=str(reply_id), user_id=str(user.id))

    async def list_replies(self, forum_id: UUID) -> list[ForumReply]:
        """All replies of a thread in creation order."""
        stmt = (
            select(ForumReply)
            .where(ForumReply.forum_id == forum_id)
            .order_by(ForumReply.created_at, ForumReply.reply_id)
        )
        async with self.session_factory() as session:
            return list((await session.scalars(stmt)).all())

    async def get_thread(self, forum_id: UUID) -> list[ReplyNode]:
        """Assemble the reply tree of a thread.

        Raises:
            ForumNotFoundError: If the thread does not exist
        """
        if await self.get_forum(forum_id) is None:
            raise ForumNotFoundError

        replies = await self.list_replies(forum_id)
        forest = build_reply_tree(replies)
        logger.debug(
            "thread_assembled",
            forum_id=str(forum_id),
            replies=len(replies),
            roots=len(forest),
        )
        return forest

    @staticmethod
    async def _get_thread_reply(
        session: AsyncSession, forum_id: UUID, reply_id: UUID
    ) -> ForumReply:
        reply = await session.get(ForumReply, reply_id)
        if reply is None or reply.forum_id != forum_id:
            raise ReplyNotFoundError
        return reply
