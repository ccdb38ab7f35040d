"""Query filtering for activity records and conversations.

Filtering never raises on malformed input: a record that cannot be judged is
treated as "not in the view".
"""

from __future__ import annotations

from collections.abc import Iterable

from feedline.models import DiscussionResponse, FeedQuery, FeedRecord


def is_hidden_for(viewer_id: str, response: DiscussionResponse) -> bool:
    """True when the viewer archived the conversation."""
    return viewer_id in (response.discussion.archived_uids or ())


def is_dismissed_by(viewer_id: str, record: FeedRecord) -> bool:
    return viewer_id in (record.dismissed_by or ())


def has_content(response: DiscussionResponse) -> bool:
    return bool(response.messages)


def discussion_in_query(viewer_id: str, query: FeedQuery | None, response: DiscussionResponse | None) -> bool:
    if not isinstance(query, FeedQuery):
        return False
    if not isinstance(response, DiscussionResponse) or response.discussion is None:
        return False
    if not has_content(response):
        return False
    if is_hidden_for(viewer_id, response) and not query.hidden:
        return False

    discussion = response.discussion
    if query.contact_id:
        return discussion.created_by == query.contact_id
    if query.group_id:
        return discussion.group_id == query.group_id
    if query.location_id:
        return discussion.location_id == query.location_id
    return True


def record_in_query(viewer_id: str, query: FeedQuery | None, record: FeedRecord | None) -> bool:
    if not isinstance(query, FeedQuery):
        return False
    if not isinstance(record, FeedRecord) or record.ref is None:
        return False
    if is_dismissed_by(viewer_id, record) and not query.hidden:
        return False

    # Conversation records are scoped by the conversation, not the envelope.
    if isinstance(record.ref, DiscussionResponse):
        return discussion_in_query(viewer_id, query, record.ref)

    if query.contact_id:
        return record.contact == query.contact_id
    if query.group_id:
        return record.group == query.group_id
    if query.location_id:
        return record.location_id == query.location_id
    return True


def filter_records(
    viewer_id: str, query: FeedQuery | None, records: Iterable[FeedRecord | None] | None
) -> tuple[FeedRecord, ...]:
    if records is None:
        return ()
    return tuple(record for record in records if record_in_query(viewer_id, query, record))


def filter_discussions(
    viewer_id: str,
    query: FeedQuery | None,
    responses: Iterable[DiscussionResponse | None] | None,
) -> tuple[DiscussionResponse, ...]:
    if responses is None:
        return ()
    return tuple(response for response in responses if discussion_in_query(viewer_id, query, response))
