"""Date and NEW/SEEN separator annotation.

Separators live in a single slot on the item that follows the boundary.
The date pass runs first; the NEW/SEEN pass runs last and overwrites the
slot when both target the same item.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import TypeVar

from feedline.config import DisplayConfig
from feedline.errors import InvariantError
from feedline.models import FeedPayload, Separator, SeparatorKind, normalize_datetime

P = TypeVar("P", bound=FeedPayload)
NowFn = Callable[[], datetime]

_DEFAULT_DISPLAY = DisplayConfig()


def new_separator(display: DisplayConfig | None = None) -> Separator:
    display = display or _DEFAULT_DISPLAY
    return Separator(text=display.new_label, color=display.active_color, has_line=True, kind=SeparatorKind.NEW)


def seen_separator(display: DisplayConfig | None = None) -> Separator:
    display = display or _DEFAULT_DISPLAY
    return Separator(text=display.seen_label, color=display.muted_color, has_line=True, kind=SeparatorKind.SEEN)


NEW_SEPARATOR = new_separator()
SEEN_SEPARATOR = seen_separator()


def format_day(day: date, pattern: str) -> str:
    """strftime with ``{day}`` expanded to the unpadded day of month."""
    return day.strftime(pattern.replace("{day}", str(day.day)))


def local_day(moment: datetime, display: DisplayConfig | None = None) -> date:
    display = display or _DEFAULT_DISPLAY
    return normalize_datetime(moment).astimezone(display.tzinfo).date()


def render_date_text(
    moment: datetime,
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> str:
    display = display or _DEFAULT_DISPLAY
    today = local_day(_now(now), display)
    day = local_day(moment, display)
    if day == today:
        return display.today_label
    return format_day(day, display.date_format)


def date_separator(
    moment: datetime,
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> Separator:
    display = display or _DEFAULT_DISPLAY
    return Separator(
        text=render_date_text(moment, display=display, now=now),
        color=display.muted_color,
        has_line=False,
        kind=SeparatorKind.DATE,
    )


def annotate_dates(
    payloads: Iterable[P],
    *,
    display: DisplayConfig | None = None,
    now: NowFn | None = None,
) -> tuple[P, ...]:
    """Flag the first item of each viewer-local day and attach its date separator."""
    display = display or _DEFAULT_DISPLAY
    current = _now(now)
    annotated: list[P] = []
    previous_day: date | None = None

    for item in payloads:
        day = local_day(item.ts, display)
        if previous_day is None or day != previous_day:
            item = replace(
                item,
                is_first_in_date=True,
                separator=date_separator(item.ts, display=display, now=lambda: current),
            )
        annotated.append(item)
        previous_day = day
    return tuple(annotated)


def last_unseen_index(payloads: Sequence[FeedPayload]) -> int | None:
    last: int | None = None
    for index, item in enumerate(payloads):
        if not item.is_seen:
            last = index
    return last


def to_full_feed(payloads: Iterable[P], *, display: DisplayConfig | None = None) -> tuple[P, ...]:
    """Attach the NEW/SEEN boundary separators to a sorted, classified feed.

    * nothing unseen: SEEN on the first item;
    * everything unseen: NEW on the first item;
    * otherwise NEW on the first item and SEEN right after the last unseen one.
    """
    items = list(payloads)
    if not items:
        return ()

    last_unseen = last_unseen_index(items)
    if last_unseen is None:
        _set_separator(items, seen_separator(display), 0)
    elif last_unseen == len(items) - 1:
        _set_separator(items, new_separator(display), 0)
    else:
        _set_separator(items, new_separator(display), 0)
        _set_separator(items, seen_separator(display), last_unseen + 1)
    return tuple(items)


def _set_separator(items: list[P], separator: Separator, index: int) -> None:
    if not 0 <= index < len(items):
        raise InvariantError(
            f"Separator '{separator.kind.value}' index {index} is outside feed of length {len(items)}."
        )
    items[index] = replace(items[index], separator=separator)


def _now(now: NowFn | None) -> datetime:
    return now() if now is not None else datetime.now(timezone.utc)
