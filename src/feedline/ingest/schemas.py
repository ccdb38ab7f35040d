"""Pydantic schemas for loosely-typed feed payloads from the backend."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MessageSchema(_Payload):
    id: str
    created_at: datetime
    user_id: str | None = None
    text: str | None = None


class MentionSchema(_Payload):
    id: str
    to_uid: str
    ts: datetime
    by_uid: str | None = None
    mid: str | None = None
    did: str | None = None


class DiscussionSchema(_Payload):
    id: str
    created_by: str
    created_at: datetime
    latest_activity_ts: datetime | None = None
    first_message: str | None = None
    latest_message: str | None = None
    group_id: str | None = None
    location_id: str | None = None
    members: list[str] = Field(default_factory=list)
    active_members: list[str] = Field(default_factory=list)
    archived_uids: list[str] = Field(default_factory=list)
    seen_at: dict[str, datetime] = Field(default_factory=dict)
    mentions: dict[str, list[MentionSchema]] = Field(default_factory=dict)

    @field_validator("members", "active_members", "archived_uids", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("seen_at", "mentions", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return {} if value is None else value


class HydratedDiscussionSchema(DiscussionSchema):
    """Discussion embedded in a feed item, carrying its messages inline."""

    messages: list[MessageSchema] | None = None


class DiscussionResponseSchema(_Payload):
    discussion: DiscussionSchema
    messages: list[MessageSchema] = Field(default_factory=list)
    user_ids: list[str] = Field(default_factory=list)

    @field_validator("messages", "user_ids", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value


class ContactRequestSchema(_Payload):
    id: str
    from_uid: str | None = Field(default=None, alias="from")
    to_uid: str | None = Field(default=None, alias="to")
    state: str | None = None
    created_at: datetime | None = None


class InviteLinkSchema(_Payload):
    id: str
    contact_id: str | None = None
    group_id: str | None = None


class ContactSchema(_Payload):
    id: str
    name: str | None = None
    avatar: str | None = None


class GroupSchema(_Payload):
    id: str
    name: str | None = None
    added_by: str | None = None


class UserSchema(_Payload):
    id: str
    name: str | None = None
    invited_by: str | None = None


class FeedItemSchema(_Payload):
    id: str
    created_at: datetime
    ref_type: str | None = None
    ref: Any = None
    feed_type: str | None = None
    seen_at: dict[str, datetime] = Field(default_factory=dict)
    dismissed_by: list[str] = Field(default_factory=list)
    contact: str | None = None
    group: str | None = None
    location_id: str | None = None

    @field_validator("dismissed_by", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("seen_at", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return {} if value is None else value
