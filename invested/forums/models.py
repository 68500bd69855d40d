"""Database models for discussion forums.

- Forums: discussion threads opened by members
- Forum replies: posts in a thread, optionally nested under another reply

`parent_reply_id` deliberately has no foreign key: parents can be
deleted while their answers remain, and such replies are shown as
top-level posts.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from invested.core.database.base import Base, UTCDateTime, utcnow


class Forum(Base):
    """Forum thread entity."""

    __tablename__ = "forums"

    forum_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    author_id: Mapped[UUID] = mapped_column(Uuid, index=True)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Forum {self.forum_id} {self.title!r}>"


class ForumReply(Base):
    """Reply entity."""

    __tablename__ = "forum_replies"
    __table_args__ = (
        Index("ix_forum_replies_forum_created", "forum_id", "created_at", "reply_id"),
    )

    reply_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    forum_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("forums.forum_id", ondelete="CASCADE")
    )
    author_id: Mapped[UUID] = mapped_column(Uuid, index=True)
    content: Mapped[str] = mapped_column(Text)
    parent_reply_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<ForumReply {self.reply_id} forum={self.forum_id} "
            f"parent={self.parent_reply_id}>"
        )
