"""Operating-time-zone clock shared by the prompt builder and commands.

Every "what day is it" question in the bot goes through one
:class:`OperatingClock` built in main.py, so tests can pin the date with
``now_fn`` instead of patching ``datetime``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

# ROC (Minguo) era: year 1 == 1912, so Gregorian = ROC + 1911.
ROC_YEAR_OFFSET = 1911

_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class OperatingClock:
    """Current date and time in a fixed time zone."""

    def __init__(
        self,
        timezone: str = "Asia/Taipei",
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._tz = ZoneInfo(timezone)
        self._now_fn = now_fn

    @property
    def timezone_name(self) -> str:
        return self._tz.key

    def now(self) -> datetime:
        if self._now_fn is None:
            return datetime.now(self._tz)
        current = self._now_fn()
        if current.tzinfo is None:
            return current.replace(tzinfo=self._tz)
        return current.astimezone(self._tz)

    def today(self) -> date:
        return self.now().date()

    def today_iso(self) -> str:
        return self.today().isoformat()

    def weekday_name(self) -> str:
        return _WEEKDAY_NAMES[self.today().weekday()]

    def roc_year(self) -> int:
        """Current year in the ROC calendar (e.g. 114 for 2025)."""
        return self.today().year - ROC_YEAR_OFFSET

    def timestamp_label(self) -> str:
        """Human-readable local timestamp used in record footers."""
        return self.now().strftime("%Y-%m-%d %H:%M")
