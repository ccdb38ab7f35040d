"""In-memory record store with live update channels.

Each kind of record has three channels:

* a keyed per-record channel, fired with the new value on every write of
  that id;
* a list channel, fired with every stored value after any write;
* an id-set channel, fired with the sorted id list whenever a write may
  change which ids a view shows (first add, or a visibility change as
  decided by :class:`~feedline.live.policy.IdSetTrigger`).

Inside :meth:`FeedStore.transaction` the list and id-set channels are
deferred and fired once when the outermost transaction exits. Per-record
channels always fire immediately.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone

from feedline.errors import StoreError
from feedline.live.channels import Channel, KeyedChannel, ListenerId
from feedline.live.policy import IdSetTrigger, discussion_membership_changed, record_membership_changed
from feedline.logging import get_logger
from feedline.models import DiscussionResponse, FeedRecord, normalize_datetime

logger = get_logger(__name__)

_RECORDS = "records"
_RECORD_IDS = "record_ids"
_DISCUSSIONS = "discussions"
_DISCUSSION_IDS = "discussion_ids"


def new_record_ids(existing: Iterable[FeedRecord], incoming: Iterable[FeedRecord]) -> frozenset[str]:
    """Ids present in ``incoming`` but not in ``existing``."""
    existing_ids = {record.id for record in existing if record is not None}
    return frozenset(record.id for record in incoming if record is not None and record.id not in existing_ids)


class FeedStore:
    """Single-writer snapshot store consumed by feed views."""

    def __init__(self, *, id_set_trigger: IdSetTrigger = IdSetTrigger.VISIBILITY) -> None:
        self._id_set_trigger = id_set_trigger
        self._records: dict[str, FeedRecord] = {}
        self._discussions: dict[str, DiscussionResponse] = {}

        self._record_channel: KeyedChannel[str, FeedRecord] = KeyedChannel("feed_record")
        self._records_channel: Channel[tuple[FeedRecord, ...]] = Channel("feed_records")
        self._record_ids_channel: Channel[tuple[str, ...]] = Channel("feed_record_ids")
        self._discussion_channel: KeyedChannel[str, DiscussionResponse] = KeyedChannel("discussion")
        self._discussions_channel: Channel[tuple[DiscussionResponse, ...]] = Channel("discussions")
        self._discussion_ids_channel: Channel[tuple[str, ...]] = Channel("discussion_ids")
        self._incoming_channel: Channel[frozenset[str]] = Channel("incoming")

        self._incoming: frozenset[str] = frozenset()
        self._last_published_incoming: frozenset[str] = frozenset()
        self._transaction_depth = 0
        self._dirty: set[str] = set()

    @property
    def id_set_trigger(self) -> IdSetTrigger:
        return self._id_set_trigger

    @property
    def in_transaction(self) -> bool:
        return self._transaction_depth > 0

    @contextmanager
    def transaction(self) -> Iterator[FeedStore]:
        """Defer list and id-set notifications until the outermost block exits."""
        self._transaction_depth += 1
        try:
            yield self
        finally:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                self._flush()

    # -- activity records -------------------------------------------------

    def put_record(self, record: FeedRecord) -> bool:
        """Store ``record`` and notify; return True when id-set consumers were (or will be) told."""
        previous = self._records.get(record.id)
        membership_changed = record_membership_changed(previous, record, self._id_set_trigger)

        self._records[record.id] = record
        self._record_channel.publish(record.id, record)

        self._mark(_RECORDS)
        if membership_changed:
            self._mark(_RECORD_IDS)
        return membership_changed

    def put_records(self, records: Iterable[FeedRecord]) -> int:
        count = 0
        with self.transaction():
            for record in records:
                self.put_record(record)
                count += 1
        return count

    def get_record(self, record_id: str) -> FeedRecord | None:
        return self._records.get(record_id)

    def records(self) -> tuple[FeedRecord, ...]:
        """All records, newest ``created_at`` first."""
        return tuple(
            sorted(self._records.values(), key=lambda record: normalize_datetime(record.created_at), reverse=True)
        )

    def record_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._records))

    def dismiss(self, record_id: str, viewer_id: str) -> FeedRecord:
        record = self._require_record(record_id)
        updated = replace(record, dismissed_by=frozenset(record.dismissed_by) | {viewer_id})
        self.put_record(updated)
        return updated

    def restore(self, record_id: str, viewer_id: str) -> FeedRecord:
        record = self._require_record(record_id)
        updated = replace(record, dismissed_by=frozenset(record.dismissed_by) - {viewer_id})
        self.put_record(updated)
        return updated

    def mark_seen(self, record_id: str, viewer_id: str, at: datetime | None = None) -> FeedRecord:
        record = self._require_record(record_id)
        seen_at = dict(record.seen_at)
        seen_at[viewer_id] = at or datetime.now(timezone.utc)
        updated = replace(record, seen_at=seen_at)
        self.put_record(updated)
        return updated

    def subscribe_record(self, record_id: str, listener: Callable[[FeedRecord], None]) -> ListenerId:
        return self._record_channel.subscribe(record_id, listener)

    def unsubscribe_record(self, record_id: str, listener_id: ListenerId) -> bool:
        return self._record_channel.unsubscribe(record_id, listener_id)

    def subscribe_records(self, listener: Callable[[tuple[FeedRecord, ...]], None]) -> ListenerId:
        return self._records_channel.subscribe(listener)

    def unsubscribe_records(self, listener_id: ListenerId) -> bool:
        return self._records_channel.unsubscribe(listener_id)

    def subscribe_record_ids(self, listener: Callable[[tuple[str, ...]], None]) -> ListenerId:
        return self._record_ids_channel.subscribe(listener)

    def unsubscribe_record_ids(self, listener_id: ListenerId) -> bool:
        return self._record_ids_channel.unsubscribe(listener_id)

    # -- conversations ----------------------------------------------------

    def put_discussion(self, response: DiscussionResponse) -> bool:
        previous = self._discussions.get(response.id)
        membership_changed = discussion_membership_changed(previous, response, self._id_set_trigger)

        self._discussions[response.id] = response
        self._discussion_channel.publish(response.id, response)

        self._mark(_DISCUSSIONS)
        if membership_changed:
            self._mark(_DISCUSSION_IDS)
        return membership_changed

    def put_discussions(self, responses: Iterable[DiscussionResponse]) -> int:
        count = 0
        with self.transaction():
            for response in responses:
                self.put_discussion(response)
                count += 1
        return count

    def get_discussion(self, discussion_id: str) -> DiscussionResponse | None:
        return self._discussions.get(discussion_id)

    def discussions(self) -> tuple[DiscussionResponse, ...]:
        return tuple(self._discussions[discussion_id] for discussion_id in sorted(self._discussions))

    def discussion_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._discussions))

    def archive(self, discussion_id: str, viewer_id: str) -> DiscussionResponse:
        response = self._require_discussion(discussion_id)
        archived = response.discussion.archived_uids
        if viewer_id not in archived:
            archived = (*archived, viewer_id)
        updated = replace(response, discussion=replace(response.discussion, archived_uids=archived))
        self.put_discussion(updated)
        return updated

    def unarchive(self, discussion_id: str, viewer_id: str) -> DiscussionResponse:
        response = self._require_discussion(discussion_id)
        archived = tuple(uid for uid in response.discussion.archived_uids if uid != viewer_id)
        updated = replace(response, discussion=replace(response.discussion, archived_uids=archived))
        self.put_discussion(updated)
        return updated

    def subscribe_discussion(
        self, discussion_id: str, listener: Callable[[DiscussionResponse], None]
    ) -> ListenerId:
        return self._discussion_channel.subscribe(discussion_id, listener)

    def unsubscribe_discussion(self, discussion_id: str, listener_id: ListenerId) -> bool:
        return self._discussion_channel.unsubscribe(discussion_id, listener_id)

    def subscribe_discussions(
        self, listener: Callable[[tuple[DiscussionResponse, ...]], None]
    ) -> ListenerId:
        return self._discussions_channel.subscribe(listener)

    def unsubscribe_discussions(self, listener_id: ListenerId) -> bool:
        return self._discussions_channel.unsubscribe(listener_id)

    def subscribe_discussion_ids(self, listener: Callable[[tuple[str, ...]], None]) -> ListenerId:
        return self._discussion_ids_channel.subscribe(listener)

    def unsubscribe_discussion_ids(self, listener_id: ListenerId) -> bool:
        return self._discussion_ids_channel.unsubscribe(listener_id)

    # -- incoming items ---------------------------------------------------

    @property
    def incoming_ids(self) -> frozenset[str]:
        return self._incoming

    def add_incoming(self, ids: Iterable[str]) -> frozenset[str]:
        """Track ids that arrived but are held back from the visible feed."""
        self._incoming = self._incoming | frozenset(ids)
        self._publish_incoming()
        return self._incoming

    def reset_incoming(self) -> None:
        self._incoming = frozenset()
        self._publish_incoming()

    def integrate_incoming(self) -> None:
        """Release held-back ids into the feed and ask list consumers to recompute."""
        self.reset_incoming()
        self._mark(_RECORDS)
        self._mark(_DISCUSSIONS)

    def subscribe_incoming(self, listener: Callable[[frozenset[str]], None]) -> ListenerId:
        return self._incoming_channel.subscribe(listener)

    def unsubscribe_incoming(self, listener_id: ListenerId) -> bool:
        return self._incoming_channel.unsubscribe(listener_id)

    # -- internals --------------------------------------------------------

    def _require_record(self, record_id: str) -> FeedRecord:
        record = self._records.get(record_id)
        if record is None:
            raise StoreError(f"Feed record '{record_id}' is not in the store.")
        return record

    def _require_discussion(self, discussion_id: str) -> DiscussionResponse:
        response = self._discussions.get(discussion_id)
        if response is None:
            raise StoreError(f"Discussion '{discussion_id}' is not in the store.")
        return response

    def _publish_incoming(self) -> None:
        if self._incoming == self._last_published_incoming:
            return
        self._last_published_incoming = self._incoming
        self._incoming_channel.publish(self._incoming)

    def _mark(self, channel: str) -> None:
        self._dirty.add(channel)
        if not self.in_transaction:
            self._flush()

    def _flush(self) -> None:
        dirty = self._dirty
        self._dirty = set()
        if dirty:
            logger.debug("Flushing live channels: %s", ", ".join(sorted(dirty)))
        if _RECORDS in dirty:
            self._records_channel.publish(self.records())
        if _RECORD_IDS in dirty:
            self._record_ids_channel.publish(self.record_ids())
        if _DISCUSSIONS in dirty:
            self._discussions_channel.publish(self.discussions())
        if _DISCUSSION_IDS in dirty:
            self._discussion_ids_channel.publish(self.discussion_ids())
