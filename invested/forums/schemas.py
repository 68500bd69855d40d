"""Pydantic schemas for discussion forums."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import Forum, ForumReply


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Content cannot be empty"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateForumRequest(BaseModel):
    """Request to open a thread."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=20000)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip whitespace and reject blank values."""
        return _strip_required(v)


class UpdateForumRequest(BaseModel):
    """Request to edit a thread. At least one field is required."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1, max_length=20000)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    @model_validator(mode="after")
    def require_change(self) -> "UpdateForumRequest":
        if self.title is None and self.content is None:
            msg = "Provide a title or content to update"
            raise ValueError(msg)
        return self


class CreateReplyRequest(BaseModel):
    """Request to post a reply."""

    content: str = Field(..., min_length=1, max_length=10000)
    parent_reply_id: UUID | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_required(v)


class UpdateReplyRequest(BaseModel):
    """Request to edit a reply."""

    content: str = Field(..., min_length=1, max_length=10000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_required(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class ForumResponse(BaseModel):
    """Thread details."""

    model_config = ConfigDict(from_attributes=True)

    forum_id: UUID
    author_id: UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, forum: Forum) -> "ForumResponse":
        return cls.model_validate(forum)


class ForumListResponse(BaseModel):
    """Page of threads, newest first."""

    items: list[ForumResponse]
    total: int
    limit: int
    offset: int


class ReplyResponse(BaseModel):
    """A single reply."""

    model_config = ConfigDict(from_attributes=True)

    reply_id: UUID
    forum_id: UUID
    author_id: UUID
    content: str
    parent_reply_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, reply: ForumReply) -> "ReplyResponse":
        return cls.model_validate(reply)


class ReplyNodeResponse(ReplyResponse):
    """A reply with its nested answers."""

    depth: int = 0
    children: list["ReplyNodeResponse"] = Field(default_factory=list)


class ThreadResponse(BaseModel):
    """Assembled reply tree of a thread."""

    forum_id: UUID
    total: int
    replies: list[ReplyNodeResponse]


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


def serialize_reply(reply: ForumReply) -> dict[str, Any]:
    """Plain fields of a reply, for thread rendering."""
    return ReplyResponse.from_entity(reply).model_dump()
