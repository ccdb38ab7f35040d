"""Turn backend JSON into feed models, dropping what cannot be read."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from feedline.errors import IngestError
from feedline.ingest.schemas import (
    ContactRequestSchema,
    ContactSchema,
    DiscussionResponseSchema,
    DiscussionSchema,
    FeedItemSchema,
    GroupSchema,
    HydratedDiscussionSchema,
    InviteLinkSchema,
    MessageSchema,
    UserSchema,
)
from feedline.logging import get_logger
from feedline.models import (
    ContactRef,
    ContactRequestRef,
    Discussion,
    DiscussionResponse,
    FeedRecord,
    GroupRef,
    InviteLinkRef,
    Mention,
    Message,
    Ref,
    RefType,
    UserRef,
    normalize_datetime,
)

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    items: tuple[T, ...]
    warnings: tuple[str, ...] = ()
    dropped: int = 0


def parse_feed_records(raw: object, *, strict: bool = False) -> ParseResult[FeedRecord]:
    """Parse a list of feed item objects.

    Items that fail validation are dropped with a warning. A batch that is not
    a list is treated as empty unless ``strict`` is set.
    """
    return _parse_batch(raw, parse_feed_record, label="feed item", strict=strict)


def parse_discussion_responses(raw: object, *, strict: bool = False) -> ParseResult[DiscussionResponse]:
    return _parse_batch(raw, parse_discussion_response, label="discussion response", strict=strict)


def parse_feed_record(raw: Mapping[str, Any]) -> FeedRecord:
    try:
        item = FeedItemSchema.model_validate(raw)
    except ValidationError as exc:
        raise IngestError(f"Invalid feed item: {_summarize(exc)}") from exc

    try:
        ref_type = RefType(item.ref_type)
    except ValueError as exc:
        raise IngestError(f"Feed item '{item.id}' has unknown ref_type {item.ref_type!r}.") from exc
    if not isinstance(item.ref, Mapping):
        raise IngestError(f"Feed item '{item.id}' has no {ref_type.value} payload.")

    try:
        ref = _REF_BUILDERS[ref_type](item.ref)
    except ValidationError as exc:
        raise IngestError(f"Feed item '{item.id}' has an invalid {ref_type.value} payload: {_summarize(exc)}") from exc

    return FeedRecord(
        id=item.id,
        ref_type=ref_type,
        ref=ref,
        created_at=normalize_datetime(item.created_at),
        seen_at=_seen_at(item.seen_at),
        dismissed_by=frozenset(item.dismissed_by),
        contact=item.contact,
        group=item.group,
        location_id=item.location_id,
        feed_type=item.feed_type,
    )


def parse_discussion_response(raw: Mapping[str, Any]) -> DiscussionResponse:
    try:
        response = DiscussionResponseSchema.model_validate(raw)
    except ValidationError as exc:
        raise IngestError(f"Invalid discussion response: {_summarize(exc)}") from exc
    return DiscussionResponse(
        discussion=_discussion(response.discussion),
        messages=tuple(_message(message) for message in response.messages),
        user_ids=tuple(response.user_ids),
    )


def _parse_batch(
    raw: object,
    parse_one: Callable[[Mapping[str, Any]], T],
    *,
    label: str,
    strict: bool,
) -> ParseResult[T]:
    if not isinstance(raw, (list, tuple)):
        if strict:
            raise IngestError(f"Expected a list of {label}s, got {type(raw).__name__}.")
        warning = f"Ignored {label} batch of type {type(raw).__name__}; expected a list."
        logger.warning(warning)
        return ParseResult(items=(), warnings=(warning,))

    items: list[T] = []
    warnings: list[str] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            warnings.append(f"Dropped {label} at index {index}: expected an object, got {type(entry).__name__}.")
            continue
        try:
            items.append(parse_one(entry))
        except IngestError as exc:
            warnings.append(f"Dropped {label} at index {index}: {exc}")

    for warning in warnings:
        logger.warning(warning)
    return ParseResult(items=tuple(items), warnings=tuple(warnings), dropped=len(warnings))


def _discussion(schema: DiscussionSchema) -> Discussion:
    created_at = normalize_datetime(schema.created_at)
    return Discussion(
        id=schema.id,
        created_by=schema.created_by,
        created_at=created_at,
        latest_activity_ts=normalize_datetime(schema.latest_activity_ts) if schema.latest_activity_ts else created_at,
        first_message=schema.first_message,
        latest_message=schema.latest_message,
        group_id=schema.group_id,
        location_id=schema.location_id,
        members=tuple(schema.members),
        active_members=tuple(schema.active_members),
        archived_uids=tuple(schema.archived_uids),
        seen_at=_seen_at(schema.seen_at),
        mentions={
            uid: tuple(
                Mention(
                    id=mention.id,
                    to_uid=mention.to_uid,
                    ts=normalize_datetime(mention.ts),
                    by_uid=mention.by_uid,
                    mid=mention.mid,
                    did=mention.did,
                )
                for mention in mentions
            )
            for uid, mentions in schema.mentions.items()
        },
    )


def _message(schema: MessageSchema) -> Message:
    return Message(
        id=schema.id,
        created_at=normalize_datetime(schema.created_at),
        user_id=schema.user_id,
        text=schema.text,
    )


def _seen_at(raw: Mapping[str, datetime]) -> dict[str, datetime]:
    return {uid: normalize_datetime(ts) for uid, ts in raw.items()}


def _hydrated_discussion(raw: Mapping[str, Any]) -> DiscussionResponse:
    schema = HydratedDiscussionSchema.model_validate(raw)
    return DiscussionResponse(
        discussion=_discussion(schema),
        messages=tuple(_message(message) for message in schema.messages or ()),
        user_ids=tuple(schema.members),
    )


def _contact_request(raw: Mapping[str, Any]) -> ContactRequestRef:
    schema = ContactRequestSchema.model_validate(raw)
    return ContactRequestRef(
        id=schema.id,
        from_uid=schema.from_uid,
        to_uid=schema.to_uid,
        state=schema.state,
        created_at=normalize_datetime(schema.created_at) if schema.created_at else None,
    )


def _invite_link(raw: Mapping[str, Any]) -> InviteLinkRef:
    schema = InviteLinkSchema.model_validate(raw)
    return InviteLinkRef(id=schema.id, contact_id=schema.contact_id, group_id=schema.group_id)


def _contact(raw: Mapping[str, Any]) -> ContactRef:
    schema = ContactSchema.model_validate(raw)
    return ContactRef(id=schema.id, name=schema.name, avatar=schema.avatar)


def _group(raw: Mapping[str, Any]) -> GroupRef:
    schema = GroupSchema.model_validate(raw)
    return GroupRef(id=schema.id, name=schema.name, added_by=schema.added_by)


def _user(raw: Mapping[str, Any]) -> UserRef:
    schema = UserSchema.model_validate(raw)
    return UserRef(id=schema.id, name=schema.name, invited_by=schema.invited_by)


_REF_BUILDERS: dict[RefType, Callable[[Mapping[str, Any]], Ref]] = {
    RefType.DISCUSSION: _hydrated_discussion,
    RefType.CONTACT_REQUEST: _contact_request,
    RefType.INVITE_LINK: _invite_link,
    RefType.CONTACT: _contact,
    RefType.GROUP: _group,
    RefType.USER: _user,
}


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)
