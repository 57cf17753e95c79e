"""
Local Time Adapter.

Implements the TimePort interface for a configurable IANA timezone.
Daily analytics series are anchored to local midnight in this zone.

Key behaviors:
- now_utc / now_ms: current UTC time
- to_local: converts UTC to the display timezone
- start_of_local_day: local midnight for any instant
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Jakarta"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_epoch_ms(dt: datetime) -> int:
    """Convert an aware (or naive-UTC) datetime to epoch milliseconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int, tz: ZoneInfo | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime (UTC by default)."""
    return (_EPOCH + timedelta(milliseconds=ms)).astimezone(tz or UTC)


def iso_utc(dt: datetime) -> str:
    """ISO-8601 UTC string with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def start_of_local_day(dt: datetime, tz: ZoneInfo) -> datetime:
    """Local midnight of the calendar day containing ``dt``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    local = dt.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


class LocalTimeAdapter:
    """Time adapter for the dashboard's display timezone."""

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE) -> None:
        """
        Initialize with specified timezone.

        Args:
            tz_name: IANA timezone name (default: Asia/Jakarta)
        """
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        return datetime.now(UTC)

    def now_ms(self) -> int:
        """Get current time as epoch milliseconds."""
        return to_epoch_ms(self.now_utc())

    def now_local(self) -> datetime:
        """Get current time in the display timezone."""
        return datetime.now(self._tz)

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to local time.

        If utc_dt is naive, it's assumed to be UTC.
        """
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt.astimezone(self._tz)

    @property
    def timezone_name(self) -> str:
        """Get the display timezone name."""
        return self._tz_name


class FrozenTimeAdapter:
    """
    Time adapter that returns a fixed time.

    Useful for deterministic testing.
    """

    def __init__(self, frozen_utc: datetime, tz_name: str = DEFAULT_TIMEZONE) -> None:
        if frozen_utc.tzinfo is None:
            frozen_utc = frozen_utc.replace(tzinfo=UTC)
        self._frozen_utc = frozen_utc.astimezone(UTC)
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_utc(self) -> datetime:
        """Get frozen UTC time."""
        return self._frozen_utc

    def now_ms(self) -> int:
        return to_epoch_ms(self._frozen_utc)

    def now_local(self) -> datetime:
        return self._frozen_utc.astimezone(self._tz)

    def to_local(self, utc_dt: datetime) -> datetime:
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt.astimezone(self._tz)

    @property
    def timezone_name(self) -> str:
        return self._tz_name

    def advance(self, delta: timedelta) -> None:
        """Advance frozen time by delta (for testing)."""
        self._frozen_utc = self._frozen_utc + delta

    def advance_ms(self, ms: int) -> None:
        """Advance frozen time by a number of milliseconds."""
        self.advance(timedelta(milliseconds=ms))


def create_time_adapter(tz_name: str = DEFAULT_TIMEZONE) -> LocalTimeAdapter:
    """Factory function to create a time adapter."""
    return LocalTimeAdapter(tz_name)
