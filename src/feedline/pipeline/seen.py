"""Seen-state classification for the viewer.

An item is seen when the viewer's recorded ``seen_at`` is at or after the
item's relevant timestamp. No entry for the viewer means never seen.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import TypeVar

from feedline.models import Discussion, FeedPayload, FeedRecord, Mention, normalize_datetime

P = TypeVar("P", bound=FeedPayload)


def seen_by(seen_at: Mapping[str, datetime] | None, viewer_id: str) -> datetime | None:
    return (seen_at or {}).get(viewer_id)


def is_seen_since(ts: datetime, seen_at: Mapping[str, datetime] | None, viewer_id: str) -> bool:
    viewer_seen_at = seen_by(seen_at, viewer_id)
    if viewer_seen_at is None:
        return False
    return normalize_datetime(ts) <= normalize_datetime(viewer_seen_at)


def is_record_seen(record: FeedRecord, viewer_id: str) -> bool:
    return is_seen_since(record.created_at, record.seen_at, viewer_id)


def is_created_seen(discussion: Discussion, viewer_id: str) -> bool:
    return is_seen_since(discussion.created_at, discussion.seen_at, viewer_id)


def is_latest_seen(discussion: Discussion, viewer_id: str) -> bool:
    return is_seen_since(discussion.latest_activity_ts, discussion.seen_at, viewer_id)


def is_mention_seen(discussion: Discussion, mentions: Iterable[Mention], viewer_id: str) -> bool:
    """Seen only when the latest mention is covered by the viewer's seen_at."""
    latest = max((normalize_datetime(mention.ts) for mention in mentions), default=None)
    if latest is None:
        return is_created_seen(discussion, viewer_id)
    return is_seen_since(latest, discussion.seen_at, viewer_id)


def preserve_unseen(
    payloads: Iterable[P], sticky_unseen: Iterable[str] = ()
) -> tuple[tuple[P, ...], frozenset[str]]:
    """Keep items unseen for as long as the caller holds the returned id set.

    Opening a feed marks its items seen in the store, which would otherwise
    make the NEW boundary vanish on the next recomputation. Ids that were
    unseen once stay unseen until the caller drops the set.
    """
    items = tuple(payloads)
    remembered = frozenset(sticky_unseen) | {item.id for item in items if not item.is_seen}
    preserved = tuple(
        replace(item, is_seen=False) if item.is_seen and item.id in remembered else item for item in items
    )
    return preserved, remembered
