"""Relative date resolution for meaningful events.

Turns relative time expressions in free text ("in two weeks", "next weekend")
into a calendar date, the canonical phrase that matched, and an urgency
bucket used to prioritise outreach.

Patterns are tried in a fixed priority order and the first match wins.
Text without a recognised expression is a normal result, never an error:
the date is None, the phrase is empty and urgency is EventUrgency.NO_DATE.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

from advisor.services.timezone import TimezoneService

logger = logging.getLogger(__name__)


class EventUrgency(str, Enum):
    """How soon a meaningful event falls."""

    IMMEDIATE = "Immediate"  # Today or already past
    THIS_WEEK = "This Week"  # 1-7 days out
    THIS_MONTH = "This Month"  # 8-30 days out
    FUTURE = "Future"  # More than 30 days out
    NO_DATE = "No Date"  # Nothing resolved


NUMBER_WORDS: dict[str, int] = {
    "a": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
}

_NUMERAL = r"([0-9]+|" + "|".join(NUMBER_WORDS) + r")"

SATURDAY = 5


@dataclass
class ParsedDate:
    """Result of resolving a relative time expression."""

    date: date | None
    relative_text: str
    urgency: EventUrgency


@dataclass
class EventDateFields:
    """Temporal fields attached to a meaningful event."""

    relative_time_text: str | None
    event_date: str | None  # YYYY-MM-DD
    urgency: EventUrgency

    def to_dict(self) -> dict[str, Any]:
        """Render as a dict, leaving out fields that were not resolved."""
        data: dict[str, Any] = {}
        if self.relative_time_text is not None:
            data["relative_time_text"] = self.relative_time_text
        if self.event_date is not None:
            data["event_date"] = self.event_date
        data["urgency"] = self.urgency.value
        return data


def parse_number(text: str) -> int:
    """Parse a numeral token ("two", "a", "12") to an integer.

    Unparseable tokens count as 1.
    """
    token = text.strip().lower()
    if token in NUMBER_WORDS:
        return NUMBER_WORDS[token]
    try:
        return int(token, 10)
    except ValueError:
        return 1


def _plural(unit: str, amount: int) -> str:
    return unit + "s" if amount > 1 else unit


def _days_until_saturday(today: date) -> int:
    # A Saturday rolls over to the following week
    return (SATURDAY - today.weekday()) % 7 or 7


def calculate_urgency(target: date | None, today: date) -> EventUrgency:
    """Bucket a resolved date by how many days away it is.

    Args:
        target: Resolved event date, or None
        today: Reference calendar day

    Returns:
        EventUrgency for the day difference
    """
    if target is None:
        return EventUrgency.NO_DATE

    diff_days = (target - today).days
    if diff_days <= 0:
        return EventUrgency.IMMEDIATE
    if diff_days <= 7:
        return EventUrgency.THIS_WEEK
    if diff_days <= 30:
        return EventUrgency.THIS_MONTH
    return EventUrgency.FUTURE


def format_date_iso(value: date | datetime) -> str:
    """Format a date as YYYY-MM-DD.

    A datetime contributes its own calendar date, with no conversion to UTC.
    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


Resolution = tuple[date, str]
Resolver = Callable[[re.Match[str], date], Resolution]


class RelativeDateResolver:
    """Resolves relative time expressions against a reference day.

    The cascade is an ordered list of (pattern, resolver) pairs. Each resolver
    receives the match and the reference day and returns the resolved date and
    its canonical phrase.
    """

    def __init__(self, timezone: str | None = None):
        """Initialize the resolver.

        Args:
            timezone: IANA timezone name used for "today".
                Defaults to settings.user_timezone.
        """
        self._tz_service = TimezoneService(timezone)
        self.patterns: list[tuple[re.Pattern[str], Resolver]] = [
            (re.compile(r"\btomorrow\b", re.IGNORECASE), self._tomorrow),
            (re.compile(r"\b(?:next week|in a week)\b", re.IGNORECASE), self._next_week),
            (re.compile(rf"\bin {_NUMERAL} days?\b", re.IGNORECASE), self._in_days),
            (re.compile(rf"\b(?:in )?{_NUMERAL} weeks?\b", re.IGNORECASE), self._in_weeks),
            (re.compile(r"\b(?:next month|in a month)\b", re.IGNORECASE), self._next_month),
            (re.compile(rf"\bin {_NUMERAL} months?\b", re.IGNORECASE), self._in_months),
            (re.compile(r"\bthis weekend\b", re.IGNORECASE), self._this_weekend),
            (re.compile(r"\bnext weekend\b", re.IGNORECASE), self._next_weekend),
        ]

    @property
    def timezone(self) -> str:
        return self._tz_service.default_timezone

    def today(self, reference_date: date | datetime | None = None) -> date:
        """Reference calendar day for a parse, defaulting to today."""
        return self._tz_service.to_local_date(reference_date)

    def parse(self, text: str | None, reference_date: date | datetime | None = None) -> ParsedDate:
        """Resolve the first relative time expression found in text.

        Args:
            text: Free text, matched case-insensitively
            reference_date: Day the expression is relative to. Defaults to
                today in the configured timezone.

        Returns:
            ParsedDate; date is None when nothing matched
        """
        today = self.today(reference_date)
        text = text or ""

        for pattern, resolve in self.patterns:
            match = pattern.search(text)
            if match is None:
                continue
            try:
                resolved, relative_text = resolve(match, today)
            except (OverflowError, ValueError):
                # Offset lands outside the representable date range
                logger.debug(f"Ignoring out-of-range expression {match.group(0)!r}")
                break
            logger.debug(f"Resolved {match.group(0)!r} to {resolved.isoformat()} ({relative_text})")
            return ParsedDate(
                date=resolved,
                relative_text=relative_text,
                urgency=calculate_urgency(resolved, today),
            )

        logger.debug("No relative date expression found")
        return ParsedDate(date=None, relative_text="", urgency=EventUrgency.NO_DATE)

    def enrich(
        self,
        description: str | None,
        reference_date: date | datetime | None = None,
    ) -> EventDateFields:
        """Extract temporal fields for a meaningful event description."""
        parsed = self.parse(description, reference_date)
        return EventDateFields(
            relative_time_text=parsed.relative_text or None,
            event_date=format_date_iso(parsed.date) if parsed.date else None,
            urgency=parsed.urgency,
        )

    # --- Resolvers, in cascade order ---

    def _tomorrow(self, match: re.Match[str], today: date) -> Resolution:
        return today + timedelta(days=1), "tomorrow"

    def _next_week(self, match: re.Match[str], today: date) -> Resolution:
        return today + timedelta(days=7), "next week"

    def _in_days(self, match: re.Match[str], today: date) -> Resolution:
        numeral = match.group(1).lower()
        days = parse_number(numeral)
        return today + timedelta(days=days), f"in {numeral} {_plural('day', days)}"

    def _in_weeks(self, match: re.Match[str], today: date) -> Resolution:
        numeral = match.group(1).lower()
        weeks = parse_number(numeral)
        return today + timedelta(weeks=weeks), f"in {numeral} {_plural('week', weeks)}"

    def _next_month(self, match: re.Match[str], today: date) -> Resolution:
        return today + relativedelta(months=1), "next month"

    def _in_months(self, match: re.Match[str], today: date) -> Resolution:
        numeral = match.group(1).lower()
        months = parse_number(numeral)
        return today + relativedelta(months=months), f"in {numeral} {_plural('month', months)}"

    def _this_weekend(self, match: re.Match[str], today: date) -> Resolution:
        return today + timedelta(days=_days_until_saturday(today)), "this weekend"

    def _next_weekend(self, match: re.Match[str], today: date) -> Resolution:
        return today + timedelta(days=_days_until_saturday(today) + 7), "next weekend"


# Module-level convenience functions

_resolver: RelativeDateResolver | None = None


def get_relative_date_resolver() -> RelativeDateResolver:
    """Get or create the global RelativeDateResolver instance."""
    global _resolver
    if _resolver is None:
        _resolver = RelativeDateResolver()
    return _resolver


def reset_relative_date_resolver() -> None:
    """Reset the singleton (useful for testing)."""
    global _resolver
    _resolver = None


def parse_relative_date(
    text: str | None,
    reference_date: date | datetime | None = None,
) -> ParsedDate:
    """Resolve a relative time expression using the global resolver."""
    return get_relative_date_resolver().parse(text, reference_date)


def enrich_event_with_date(
    description: str | None,
    reference_date: date | datetime | None = None,
) -> EventDateFields:
    """Extract temporal fields from an event description using the global resolver."""
    return get_relative_date_resolver().enrich(description, reference_date)
