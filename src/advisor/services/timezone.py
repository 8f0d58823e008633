"""Timezone handling for meaningful-event dates.

All resolved event dates are calendar days in the user's configured timezone:
- "today" is the current date in settings.user_timezone
- Reference datetimes are normalised to a local calendar date
- Time of day never takes part in date arithmetic
"""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from advisor.config import settings

logger = logging.getLogger(__name__)


class TimezoneService:
    """Provides the user's local "today" and reference-date normalisation."""

    def __init__(self, default_timezone: str | None = None):
        """Initialize timezone service.

        Args:
            default_timezone: IANA timezone name. Defaults to settings.user_timezone.
        """
        self._default_tz_name = default_timezone or settings.user_timezone
        try:
            self._default_tz = ZoneInfo(self._default_tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self._default_tz_name!r}, falling back to UTC")
            self._default_tz_name = "UTC"
            self._default_tz = ZoneInfo("UTC")

    @property
    def default_timezone(self) -> str:
        """Get the default timezone name."""
        return self._default_tz_name

    def now(self) -> datetime:
        """Get current time in user's timezone."""
        return datetime.now(self._default_tz)

    def today(self) -> date:
        """Get today's calendar date in user's timezone."""
        return self.now().date()

    def to_local_date(self, reference: date | datetime | None = None) -> date:
        """Normalise a reference point to a calendar date in user's timezone.

        Args:
            reference: A date, a naive datetime (taken as already local),
                an aware datetime (converted to user's timezone), or None
                for today.

        Returns:
            The local calendar date

        Raises:
            TypeError: If reference is not a date or datetime
        """
        if reference is None:
            return self.today()
        # datetime is a subclass of date, check it first
        if isinstance(reference, datetime):
            if reference.tzinfo is None:
                return reference.date()
            return reference.astimezone(self._default_tz).date()
        if isinstance(reference, date):
            return reference
        raise TypeError(f"reference must be a date or datetime, got {type(reference).__name__}")


# Module-level singleton
_timezone_service: TimezoneService | None = None


def get_timezone_service(default_timezone: str | None = None) -> TimezoneService:
    """Get the singleton TimezoneService instance.

    Args:
        default_timezone: Optional timezone to use. Only used on first call.

    Returns:
        TimezoneService instance
    """
    global _timezone_service
    if _timezone_service is None:
        _timezone_service = TimezoneService(default_timezone)
    return _timezone_service


def reset_timezone_service() -> None:
    """Reset the singleton (useful for testing)."""
    global _timezone_service
    _timezone_service = None
