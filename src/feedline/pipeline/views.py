"""Feed views composed from the filter, dedup, sort, seen and separator stages."""

from __future__ import annotations

from collections.abc import Iterable
from typing import assert_never

from feedline.config import DisplayConfig
from feedline.logging import get_logger
from feedline.models import (
    ContactRequestPayload,
    ContactRequestRef,
    DiscussionResponse,
    FeedPayload,
    FeedQuery,
    FeedRecord,
    MentionPayload,
    PostPayload,
    RecordPayload,
)
from feedline.pipeline.dedup import dedup_records
from feedline.pipeline.filter import discussion_in_query, filter_records
from feedline.pipeline.seen import (
    is_created_seen,
    is_latest_seen,
    is_mention_seen,
    is_record_seen,
    is_seen_since,
)
from feedline.pipeline.separators import NowFn, annotate_dates, to_full_feed
from feedline.pipeline.sort import sort_by_created_at_desc, sort_by_ts_desc, sort_mentions_asc

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Payload constructors
# ---------------------------------------------------------------------------


def record_to_payload(record: FeedRecord, viewer_id: str) -> RecordPayload:
    return RecordPayload(
        id=record.id,
        ts=record.created_at,
        record=record,
        is_seen=is_record_seen(record, viewer_id),
    )


def post_to_all_posts_payload(
    response: DiscussionResponse, viewer_id: str
) -> PostPayload | MentionPayload:
    """A conversation mentioning the viewer becomes a mention keyed on its latest mention."""
    discussion = response.discussion
    mentions = sort_mentions_asc((discussion.mentions or {}).get(viewer_id, ()))
    if mentions:
        return MentionPayload(
            id=discussion.id,
            ts=mentions[-1].ts,
            discussion_response=response,
            mentions=mentions,
            is_seen=is_mention_seen(discussion, mentions, viewer_id),
        )
    return PostPayload(
        id=discussion.id,
        ts=discussion.created_at,
        discussion_response=response,
        is_seen=is_created_seen(discussion, viewer_id),
    )


def post_to_active_payload(response: DiscussionResponse, viewer_id: str) -> PostPayload:
    discussion = response.discussion
    return PostPayload(
        id=discussion.id,
        ts=discussion.latest_activity_ts,
        discussion_response=response,
        is_seen=is_latest_seen(discussion, viewer_id),
    )


def post_to_search_payload(response: DiscussionResponse) -> PostPayload:
    return PostPayload(
        id=response.discussion.id,
        ts=response.discussion.created_at,
        discussion_response=response,
        is_seen=True,
    )


def contact_request_to_payload(
    request: ContactRequestRef, record: FeedRecord, viewer_id: str
) -> ContactRequestPayload:
    """Lift a contact request out of its envelope; seen state follows the envelope."""
    return ContactRequestPayload(
        id=request.id,
        ts=record.created_at,
        contact_request=request,
        is_seen=is_seen_since(record.created_at, record.seen_at, viewer_id),
    )


def payload_discussion(payload: FeedPayload) -> DiscussionResponse | None:
    """The conversation behind a payload, if it has one."""
    if isinstance(payload, (MentionPayload, PostPayload)):
        return payload.discussion_response
    if isinstance(payload, RecordPayload):
        ref = payload.record.ref
        return ref if isinstance(ref, DiscussionResponse) else None
    if isinstance(payload, ContactRequestPayload):
        return None
    assert_never(payload)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def has_replies(response: DiscussionResponse) -> bool:
    return response.discussion.latest_message != response.discussion.first_message


def is_active_member(viewer_id: str, response: DiscussionResponse) -> bool:
    return viewer_id in set(response.discussion.active_members or ())


def to_sorted_feed_items(
    viewer_id: str,
    query: FeedQuery | None,
    records: Iterable[FeedRecord | None] | None,
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> tuple[RecordPayload, ...]:
    """Main feed: filter, newest first, one item per entity, seen flags and day separators."""
    if records is None:
        return ()

    in_view = sort_by_created_at_desc(filter_records(viewer_id, query, records))
    unique = dedup_records(in_view)
    payloads = sort_by_ts_desc(record_to_payload(record, viewer_id) for record in unique)
    logger.debug("Main feed for %s: %d in view, %d unique", viewer_id, len(in_view), len(unique))
    return annotate_dates(payloads, display=display, now=now)


def to_sorted_active_feed_items(
    viewer_id: str,
    query: FeedQuery | None,
    responses: Iterable[DiscussionResponse | None] | None,
) -> tuple[PostPayload, ...]:
    """Conversations with replies the viewer takes part in, by latest activity."""
    if responses is None:
        return ()
    eligible = (
        response
        for response in responses
        if discussion_in_query(viewer_id, query, response)
        and has_replies(response)
        and is_active_member(viewer_id, response)
    )
    return sort_by_ts_desc(post_to_active_payload(response, viewer_id) for response in eligible)


def to_sorted_post_feed_items(
    viewer_id: str,
    query: FeedQuery | None,
    responses: Iterable[DiscussionResponse | None] | None,
) -> tuple[PostPayload | MentionPayload, ...]:
    """All conversations in the view, mentions ordered by the latest mention of the viewer."""
    if responses is None:
        return ()
    return sort_by_ts_desc(
        post_to_all_posts_payload(response, viewer_id)
        for response in responses
        if discussion_in_query(viewer_id, query, response)
    )


def to_sorted_search_feed_items(
    viewer_id: str, responses: Iterable[DiscussionResponse | None] | None
) -> tuple[PostPayload, ...]:
    """Search results: newest first and always seen.

    ``viewer_id`` is unused today; search carries no per-viewer state.
    """
    if responses is None:
        return ()
    return sort_by_ts_desc(
        post_to_search_payload(response)
        for response in responses
        if isinstance(response, DiscussionResponse) and response.discussion is not None
    )


# ---------------------------------------------------------------------------
# Full feeds (view + NEW/SEEN boundary)
# ---------------------------------------------------------------------------


def build_main_feed(
    viewer_id: str,
    query: FeedQuery | None,
    records: Iterable[FeedRecord | None] | None,
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> tuple[RecordPayload, ...]:
    items = to_sorted_feed_items(viewer_id, query, records, display=display, now=now)
    return to_full_feed(items, display=display)


def build_active_feed(
    viewer_id: str,
    query: FeedQuery | None,
    responses: Iterable[DiscussionResponse | None] | None,
    *,
    display: DisplayConfig | None = None,
) -> tuple[PostPayload, ...]:
    return to_full_feed(to_sorted_active_feed_items(viewer_id, query, responses), display=display)


def build_post_feed(
    viewer_id: str,
    query: FeedQuery | None,
    responses: Iterable[DiscussionResponse | None] | None,
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> tuple[PostPayload | MentionPayload, ...]:
    items = to_sorted_post_feed_items(viewer_id, query, responses)
    return to_full_feed(annotate_dates(items, display=display, now=now), display=display)


def build_search_feed(
    viewer_id: str,
    responses: Iterable[DiscussionResponse | None] | None,
    *,
    display: DisplayConfig | None = None,
) -> tuple[PostPayload, ...]:
    return to_full_feed(to_sorted_search_feed_items(viewer_id, responses), display=display)
