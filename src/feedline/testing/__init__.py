"""Deterministic clocks for feed tests."""

from .time_control import fixed_now, local_clock, local_day_bounds

__all__ = ["fixed_now", "local_clock", "local_day_bounds"]
