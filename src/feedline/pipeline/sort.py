"""Chronological ordering helpers.

All sorts are stable, so exact timestamp ties keep their input order.
Naive timestamps sort as UTC.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from feedline.models import FeedPayload, FeedRecord, Mention, normalize_datetime

P = TypeVar("P", bound=FeedPayload)


def sort_by_created_at_desc(records: Iterable[FeedRecord]) -> tuple[FeedRecord, ...]:
    return tuple(sorted(records, key=lambda record: normalize_datetime(record.created_at), reverse=True))


def sort_by_ts_desc(payloads: Iterable[P]) -> tuple[P, ...]:
    return tuple(sorted(payloads, key=lambda payload: normalize_datetime(payload.ts), reverse=True))


def sort_mentions_asc(mentions: Iterable[Mention]) -> tuple[Mention, ...]:
    return tuple(sorted(mentions, key=lambda mention: normalize_datetime(mention.ts)))


def is_sorted_desc(payloads: Iterable[FeedPayload]) -> bool:
    previous: datetime | None = None
    for payload in payloads:
        current = normalize_datetime(payload.ts)
        if previous is not None and current > previous:
            return False
        previous = current
    return True
