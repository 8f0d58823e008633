"""Meaningful events captured during advisor conversations.

A meaningful event is a customer milestone (birthday, anniversary, trip)
mentioned in chat. Temporal fields are derived from the description so that
outreach can be scheduled; storage of the record is up to the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Any

from advisor.services.relative_dates import (
    EventDateFields,
    EventUrgency,
    RelativeDateResolver,
    calculate_urgency,
    get_relative_date_resolver,
)

logger = logging.getLogger(__name__)


@dataclass
class MeaningfulEvent:
    """A customer milestone plus its optional temporal fields."""

    event_type: str  # e.g. "birthday", "anniversary", "travel"
    description: str
    captured_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    agent_note: str = ""
    metadata: dict[str, Any] | None = None
    relative_time_text: str | None = None
    event_date: str | None = None  # YYYY-MM-DD
    urgency: EventUrgency | None = None

    def with_temporal_fields(self, fields: EventDateFields) -> "MeaningfulEvent":
        """Return a copy carrying the given temporal fields."""
        return replace(
            self,
            relative_time_text=fields.relative_time_text,
            event_date=fields.event_date,
            urgency=fields.urgency,
        )

    def to_record(self) -> dict[str, Any]:
        """Flat record for persistence. Temporal fields appear only when set."""
        record: dict[str, Any] = {
            "event_type": self.event_type,
            "description": self.description,
            "captured_at": self.captured_at.isoformat(),
            "agent_note": self.agent_note,
            "metadata": self.metadata,
        }
        if self.relative_time_text:
            record["relative_time_text"] = self.relative_time_text
        if self.event_date:
            record["event_date"] = self.event_date
        if self.urgency:
            record["urgency"] = self.urgency.value
        return record


def enrich_meaningful_event(
    event: MeaningfulEvent,
    reference_date: date | datetime | None = None,
    resolver: RelativeDateResolver | None = None,
) -> MeaningfulEvent:
    """Fill in temporal fields from the event's description.

    An event that already has an explicit event_date keeps it and only its
    urgency is recomputed.

    Args:
        event: Event to enrich
        reference_date: Day the description is relative to. Defaults to today.
        resolver: Resolver to use. Defaults to the global resolver.

    Returns:
        A new MeaningfulEvent; the input is not modified
    """
    resolver = resolver or get_relative_date_resolver()

    if event.event_date:
        today = resolver.today(reference_date)
        try:
            explicit = date.fromisoformat(event.event_date)
        except ValueError:
            logger.warning(
                f"Ignoring malformed event_date {event.event_date!r} on {event.event_type} event"
            )
        else:
            return replace(event, urgency=calculate_urgency(explicit, today))

    fields = resolver.enrich(event.description, reference_date)
    if fields.event_date:
        logger.info(
            f"Scheduled {event.event_type} event for {fields.event_date} "
            f"({fields.relative_time_text}, {fields.urgency.value})"
        )
    return event.with_temporal_fields(fields)
