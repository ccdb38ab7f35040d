"""Data model contracts for cross-module use.

Records arrive from the external store as immutable snapshots. Every
timestamp is expected to be timezone-aware. ``feedline.ingest`` normalizes
naive values to UTC before building these types, and the pipeline compares
timestamps through :func:`normalize_datetime` so a naive value built by hand
is read as UTC rather than failing the comparison.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Union


def normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RefType(str, Enum):
    DISCUSSION = "discussion"
    CONTACT_REQUEST = "contact_request"
    INVITE_LINK = "invite_link"
    CONTACT = "contact"
    GROUP = "group"
    USER = "user"


class SeparatorKind(str, Enum):
    DATE = "date"
    NEW = "new"
    SEEN = "seen"


@dataclass(frozen=True)
class Message:
    id: str
    created_at: datetime
    user_id: str | None = None
    text: str | None = None


@dataclass(frozen=True)
class Mention:
    id: str
    to_uid: str
    ts: datetime
    by_uid: str | None = None
    mid: str | None = None
    did: str | None = None


@dataclass(frozen=True)
class Discussion:
    id: str
    created_by: str
    created_at: datetime
    latest_activity_ts: datetime
    first_message: str | None = None
    latest_message: str | None = None
    group_id: str | None = None
    location_id: str | None = None
    members: tuple[str, ...] = ()
    active_members: tuple[str, ...] = ()
    archived_uids: tuple[str, ...] = ()
    seen_at: Mapping[str, datetime] = field(default_factory=dict)
    mentions: Mapping[str, tuple[Mention, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class DiscussionResponse:
    """A conversation together with its loaded messages."""

    discussion: Discussion
    messages: tuple[Message, ...] = ()
    user_ids: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.discussion.id


@dataclass(frozen=True)
class ContactRequestRef:
    id: str
    from_uid: str | None = None
    to_uid: str | None = None
    state: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class InviteLinkRef:
    id: str
    contact_id: str | None = None
    group_id: str | None = None


@dataclass(frozen=True)
class ContactRef:
    id: str
    name: str | None = None
    avatar: str | None = None


@dataclass(frozen=True)
class GroupRef:
    id: str
    name: str | None = None
    added_by: str | None = None


@dataclass(frozen=True)
class UserRef:
    id: str
    name: str | None = None
    invited_by: str | None = None


Ref = Union[DiscussionResponse, ContactRequestRef, InviteLinkRef, ContactRef, GroupRef, UserRef]

# Payload type expected for each discriminant.
REF_CLASSES: Mapping[RefType, type] = {
    RefType.DISCUSSION: DiscussionResponse,
    RefType.CONTACT_REQUEST: ContactRequestRef,
    RefType.INVITE_LINK: InviteLinkRef,
    RefType.CONTACT: ContactRef,
    RefType.GROUP: GroupRef,
    RefType.USER: UserRef,
}


@dataclass(frozen=True)
class FeedRecord:
    """Activity record envelope as stored by the client."""

    id: str
    ref_type: RefType | None
    ref: Ref | None
    created_at: datetime
    seen_at: Mapping[str, datetime] = field(default_factory=dict)
    dismissed_by: frozenset[str] = frozenset()
    contact: str | None = None
    group: str | None = None
    location_id: str | None = None
    feed_type: str | None = None


@dataclass(frozen=True)
class FeedQuery:
    contact_id: str | None = None
    group_id: str | None = None
    location_id: str | None = None
    hidden: bool = False


@dataclass(frozen=True)
class Separator:
    text: str
    color: str
    has_line: bool
    kind: SeparatorKind


@dataclass(frozen=True)
class MentionPayload:
    id: str
    ts: datetime
    discussion_response: DiscussionResponse
    mentions: tuple[Mention, ...]
    is_seen: bool = False
    is_first_in_date: bool = False
    separator: Separator | None = None

    type: ClassVar[str] = "mention"


@dataclass(frozen=True)
class PostPayload:
    id: str
    ts: datetime
    discussion_response: DiscussionResponse
    is_seen: bool = False
    is_first_in_date: bool = False
    separator: Separator | None = None

    type: ClassVar[str] = "post"


@dataclass(frozen=True)
class ContactRequestPayload:
    id: str
    ts: datetime
    contact_request: ContactRequestRef
    is_seen: bool = False
    is_first_in_date: bool = False
    separator: Separator | None = None

    type: ClassVar[str] = "contact_request"


@dataclass(frozen=True)
class RecordPayload:
    id: str
    ts: datetime
    record: FeedRecord
    is_seen: bool = False
    is_first_in_date: bool = False
    separator: Separator | None = None

    type: ClassVar[str] = "feed_item"


FeedPayload = Union[MentionPayload, PostPayload, ContactRequestPayload, RecordPayload]
