"""Entity deduplication across activity records."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from feedline.errors import InvariantError
from feedline.models import (
    ContactRef,
    ContactRequestRef,
    Discussion,
    DiscussionResponse,
    FeedRecord,
    GroupRef,
    Message,
    RefType,
    UserRef,
)
from feedline.pipeline import dedup
from feedline.pipeline.dedup import dedup_records
from feedline.pipeline.sort import sort_by_created_at_desc

BASE = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_newest_record_wins_for_repeated_conversation() -> None:
    response = _response("d1")
    t1 = _record("f1", RefType.DISCUSSION, response, minutes=1)
    t2 = _record("f2", RefType.DISCUSSION, response, minutes=2)
    t3 = _record("f3", RefType.DISCUSSION, response, minutes=3)

    kept = dedup_records(sort_by_created_at_desc([t1, t3, t2]))

    assert [record.id for record in kept] == ["f3"]


def test_same_ref_id_under_different_types_is_kept() -> None:
    as_user = _record("f1", RefType.USER, UserRef(id="x1"), minutes=1)
    as_group = _record("f2", RefType.GROUP, GroupRef(id="x1"), minutes=2)
    as_contact = _record("f3", RefType.CONTACT, ContactRef(id="x1"), minutes=3)

    kept = dedup_records([as_contact, as_group, as_user])

    assert [record.id for record in kept] == ["f3", "f2", "f1"]


def test_keeps_first_occurrence_in_input_order() -> None:
    older_first = [
        _record("f-old", RefType.CONTACT, ContactRef(id="c1"), minutes=1),
        _record("f-new", RefType.CONTACT, ContactRef(id="c1"), minutes=5),
    ]
    assert [record.id for record in dedup_records(older_first)] == ["f-old"]


def test_invalid_records_are_dropped() -> None:
    valid = _record("f-ok", RefType.CONTACT, ContactRef(id="c1"), minutes=1)
    records = [
        None,
        FeedRecord(id="f-no-ref", ref_type=RefType.CONTACT, ref=None, created_at=BASE),
        FeedRecord(id="f-no-type", ref_type=None, ref=ContactRef(id="c2"), created_at=BASE),
        FeedRecord(id="f-unknown", ref_type="poll", ref=ContactRef(id="c3"), created_at=BASE),  # type: ignore[arg-type]
        _record("f-mismatch", RefType.GROUP, ContactRequestRef(id="cr1"), minutes=2),
        _record("f-empty-id", RefType.USER, UserRef(id=""), minutes=3),
        valid,
    ]
    assert dedup_records(records) == (valid,)


def test_string_ref_type_is_accepted() -> None:
    record = FeedRecord(id="f1", ref_type="contact", ref=ContactRef(id="c1"), created_at=BASE)  # type: ignore[arg-type]
    assert dedup_records([record]) == (record,)


def test_buckets_are_fresh_per_call() -> None:
    record = _record("f1", RefType.CONTACT, ContactRef(id="c1"), minutes=1)
    assert dedup_records([record]) == (record,)
    assert dedup_records([record]) == (record,)


def test_empty_input() -> None:
    assert dedup_records([]) == ()


def test_missing_bucket_is_an_invariant_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(dedup, "_new_buckets", dict)
    record = _record("f1", RefType.CONTACT, ContactRef(id="c1"), minutes=1)
    with pytest.raises(InvariantError, match="no bucket for ref_type 'contact'"):
        dedup_records([record])


def _response(discussion_id: str) -> DiscussionResponse:
    discussion = Discussion(
        id=discussion_id,
        created_by="u-author",
        created_at=BASE,
        latest_activity_ts=BASE,
        first_message="m1",
        latest_message="m1",
    )
    return DiscussionResponse(
        discussion=discussion,
        messages=(Message(id="m1", created_at=BASE, user_id="u-author", text="hi"),),
    )


def _record(record_id: str, ref_type: RefType, ref: object, *, minutes: int) -> FeedRecord:
    return FeedRecord(
        id=record_id,
        ref_type=ref_type,
        ref=ref,  # type: ignore[arg-type]
        created_at=BASE + timedelta(minutes=minutes),
    )
