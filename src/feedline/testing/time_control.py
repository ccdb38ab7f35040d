"""Viewer-local clocks for date separator tests.

"Today" is decided in the display timezone, so these helpers build clocks
and day boundaries from wall-clock values in that timezone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from feedline.config import DisplayConfig
from feedline.pipeline.separators import NowFn

_DEFAULT_DISPLAY = DisplayConfig()


def fixed_now(moment: datetime) -> NowFn:
    """Clock that always reports ``moment``."""
    if moment.tzinfo is None:
        raise ValueError("fixed_now needs an aware datetime; a naive one has no calendar day for the viewer.")

    def _now() -> datetime:
        return moment

    return _now


def local_clock(
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    minute: int = 0,
    *,
    display: DisplayConfig | None = None,
) -> NowFn:
    """Clock pinned to a wall-clock time in the viewer's timezone."""
    display = display or _DEFAULT_DISPLAY
    return fixed_now(datetime(year, month, day, hour, minute, tzinfo=display.tzinfo))


def local_day_bounds(day: date, *, display: DisplayConfig | None = None) -> tuple[datetime, datetime]:
    """UTC instants where ``day`` starts and the next viewer-local day starts."""
    display = display or _DEFAULT_DISPLAY
    start = datetime.combine(day, time.min, tzinfo=display.tzinfo)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=display.tzinfo)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
