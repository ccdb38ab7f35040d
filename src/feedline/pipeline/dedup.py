"""Entity deduplication across activity records."""

from __future__ import annotations

from collections.abc import Iterable

from feedline.errors import InvariantError
from feedline.logging import get_logger
from feedline.models import REF_CLASSES, FeedRecord, RefType

logger = get_logger(__name__)


def dedup_records(records: Iterable[FeedRecord | None]) -> tuple[FeedRecord, ...]:
    """Keep the first record seen for each ``(ref_type, ref.id)``.

    Input must already be ordered most-recent-first so the newest record for
    an entity wins. Ids are only unique within a ref type, so each type gets
    its own bucket. Records without a usable ref are dropped.
    """
    shown = _new_buckets()
    kept: list[FeedRecord] = []
    dropped_invalid = 0
    deduped = 0

    for record in records:
        ref_type = _ref_type_of(record)
        ref_id = _ref_id_of(record)
        if ref_type is None or ref_id is None:
            dropped_invalid += 1
            continue

        seen_ids = shown.get(ref_type)
        if seen_ids is None:
            raise InvariantError(f"Deduplication has no bucket for ref_type '{ref_type.value}'.")
        if ref_id in seen_ids:
            deduped += 1
            continue

        seen_ids.add(ref_id)
        kept.append(record)

    if dropped_invalid or deduped:
        logger.debug(
            "Deduplicated feed records: kept=%d deduped=%d dropped_invalid=%d",
            len(kept),
            deduped,
            dropped_invalid,
        )
    return tuple(kept)


def _new_buckets() -> dict[RefType, set[str]]:
    return {ref_type: set() for ref_type in RefType}


def _ref_type_of(record: FeedRecord | None) -> RefType | None:
    if record is None or record.ref is None or record.ref_type is None:
        return None
    try:
        ref_type = RefType(record.ref_type)
    except ValueError:
        return None
    if not isinstance(record.ref, REF_CLASSES[ref_type]):
        return None
    return ref_type


def _ref_id_of(record: FeedRecord | None) -> str | None:
    if record is None or record.ref is None:
        return None
    ref_id = getattr(record.ref, "id", None)
    if not isinstance(ref_id, str) or not ref_id:
        return None
    return ref_id
