"""Rules deciding when a write may change view membership."""

from __future__ import annotations

from enum import Enum

from feedline.models import DiscussionResponse, FeedRecord


class IdSetTrigger(str, Enum):
    """Which changes on an existing id fire the id-set channel."""

    # anything the query filter reads changed
    VISIBILITY = "visibility"
    # any field changed at all
    ANY_CHANGE = "any_change"


def record_membership_changed(
    previous: FeedRecord | None,
    current: FeedRecord,
    trigger: IdSetTrigger = IdSetTrigger.VISIBILITY,
) -> bool:
    """Return True when writing ``current`` over ``previous`` must refresh id-set consumers.

    A record wrapping a conversation is judged by that conversation, so its
    archive state and messages count as well.
    """
    if previous is None:
        return True
    if trigger is IdSetTrigger.ANY_CHANGE:
        return previous != current
    if _record_scope(previous) != _record_scope(current):
        return True
    if frozenset(previous.dismissed_by) != frozenset(current.dismissed_by):
        return True
    if set(previous.seen_at) != set(current.seen_at):
        return True

    before, after = previous.ref, current.ref
    if isinstance(before, DiscussionResponse) or isinstance(after, DiscussionResponse):
        if not (isinstance(before, DiscussionResponse) and isinstance(after, DiscussionResponse)):
            return True
        return discussion_membership_changed(before, after, trigger)
    return False


def discussion_membership_changed(
    previous: DiscussionResponse | None,
    current: DiscussionResponse,
    trigger: IdSetTrigger = IdSetTrigger.VISIBILITY,
) -> bool:
    """Conversation counterpart of :func:`record_membership_changed`.

    Message count matters too: a conversation going from zero to one message
    enters every view.
    """
    if previous is None:
        return True
    if trigger is IdSetTrigger.ANY_CHANGE:
        return previous != current

    before = previous.discussion
    after = current.discussion
    if before is None or after is None:
        return before is not after
    return (
        (before.created_by, before.group_id, before.location_id)
        != (after.created_by, after.group_id, after.location_id)
        or set(before.archived_uids) != set(after.archived_uids)
        or set(before.active_members) != set(after.active_members)
        or set(before.seen_at) != set(after.seen_at)
        or before.latest_message != after.latest_message
        or bool(previous.messages) != bool(current.messages)
    )


def _record_scope(record: FeedRecord) -> tuple[object, ...]:
    return (
        record.ref_type,
        getattr(record.ref, "id", None),
        record.contact,
        record.group,
        record.location_id,
    )
