"""Report period selector."""

from __future__ import annotations

from typing import Literal

__all__ = ["PERIODS", "Period"]

Period = Literal["day", "week", "month"]

PERIODS: tuple[Period, ...] = ("day", "week", "month")
