"""Seen-state classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from feedline.models import ContactRef, Discussion, FeedRecord, Mention, RecordPayload, RefType
from feedline.pipeline.seen import (
    is_created_seen,
    is_latest_seen,
    is_mention_seen,
    is_record_seen,
    is_seen_since,
    preserve_unseen,
)

VIEWER = "u-viewer"
BASE = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_no_entry_for_viewer_means_unseen() -> None:
    assert is_seen_since(BASE, {}, VIEWER) is False
    assert is_seen_since(BASE, None, VIEWER) is False
    assert is_seen_since(BASE, {"u-other": BASE + timedelta(days=1)}, VIEWER) is False


def test_seen_at_equal_to_timestamp_counts_as_seen() -> None:
    assert is_seen_since(BASE, {VIEWER: BASE}, VIEWER) is True
    assert is_seen_since(BASE, {VIEWER: BASE - timedelta(seconds=1)}, VIEWER) is False


def test_naive_timestamps_compare_as_utc() -> None:
    assert is_seen_since(datetime(2026, 3, 1, 12, 0), {VIEWER: BASE}, VIEWER) is True
    assert is_seen_since(BASE, {VIEWER: datetime(2026, 3, 1, 11, 59)}, VIEWER) is False


def test_record_seen_uses_created_at() -> None:
    record = FeedRecord(
        id="f1",
        ref_type=RefType.CONTACT,
        ref=ContactRef(id="c1"),
        created_at=BASE,
        seen_at={VIEWER: BASE + timedelta(minutes=1)},
    )
    assert is_record_seen(record, VIEWER) is True
    assert is_record_seen(record, "u-other") is False


def test_active_view_uses_latest_activity() -> None:
    discussion = _discussion(
        latest_activity_ts=BASE + timedelta(hours=1),
        seen_at={VIEWER: BASE + timedelta(minutes=30)},
    )
    assert is_created_seen(discussion, VIEWER) is True
    assert is_latest_seen(discussion, VIEWER) is False


def test_mention_seen_tracks_latest_mention() -> None:
    mentions = (
        Mention(id="m1", to_uid=VIEWER, ts=BASE + timedelta(minutes=5)),
        Mention(id="m2", to_uid=VIEWER, ts=BASE + timedelta(minutes=50)),
    )
    caught_up = _discussion(seen_at={VIEWER: BASE + timedelta(hours=1)})
    behind = _discussion(seen_at={VIEWER: BASE + timedelta(minutes=10)})

    assert is_mention_seen(caught_up, mentions, VIEWER) is True
    assert is_mention_seen(behind, mentions, VIEWER) is False


def test_mention_seen_without_mentions_falls_back_to_creation() -> None:
    discussion = _discussion(seen_at={VIEWER: BASE})
    assert is_mention_seen(discussion, (), VIEWER) is True


def test_preserve_unseen_keeps_items_unseen_after_being_marked_seen() -> None:
    first, remembered = preserve_unseen([_payload("a", seen=False), _payload("b", seen=True)])
    assert [item.is_seen for item in first] == [False, True]
    assert remembered == frozenset({"a"})

    # The viewer opened the feed; the store now reports everything seen.
    second, remembered = preserve_unseen([_payload("a", seen=True), _payload("b", seen=True)], remembered)
    assert [item.is_seen for item in second] == [False, True]
    assert remembered == frozenset({"a"})


def test_preserve_unseen_without_memory_is_identity() -> None:
    items = (_payload("a", seen=True), _payload("b", seen=False))
    preserved, _ = preserve_unseen(items)
    assert preserved == items


def _discussion(
    *,
    latest_activity_ts: datetime = BASE,
    seen_at: dict[str, datetime] | None = None,
) -> Discussion:
    return Discussion(
        id="d1",
        created_by="u-author",
        created_at=BASE,
        latest_activity_ts=latest_activity_ts,
        seen_at=seen_at or {},
    )


def _payload(payload_id: str, *, seen: bool) -> RecordPayload:
    record = FeedRecord(id=payload_id, ref_type=RefType.CONTACT, ref=ContactRef(id=payload_id), created_at=BASE)
    return RecordPayload(id=payload_id, ts=BASE, record=record, is_seen=seen)
