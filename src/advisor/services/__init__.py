"""Meaningful-event services.

Relative date resolution, urgency bucketing and event enrichment. Imports are
lazy so that importing the package does not load settings until needed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Relative dates
    "EventDateFields": ("advisor.services.relative_dates", "EventDateFields"),
    "EventUrgency": ("advisor.services.relative_dates", "EventUrgency"),
    "ParsedDate": ("advisor.services.relative_dates", "ParsedDate"),
    "RelativeDateResolver": ("advisor.services.relative_dates", "RelativeDateResolver"),
    "calculate_urgency": ("advisor.services.relative_dates", "calculate_urgency"),
    "enrich_event_with_date": ("advisor.services.relative_dates", "enrich_event_with_date"),
    "format_date_iso": ("advisor.services.relative_dates", "format_date_iso"),
    "get_relative_date_resolver": (
        "advisor.services.relative_dates",
        "get_relative_date_resolver",
    ),
    "parse_relative_date": ("advisor.services.relative_dates", "parse_relative_date"),
    "reset_relative_date_resolver": (
        "advisor.services.relative_dates",
        "reset_relative_date_resolver",
    ),
    # Meaningful events
    "MeaningfulEvent": ("advisor.services.events", "MeaningfulEvent"),
    "enrich_meaningful_event": ("advisor.services.events", "enrich_meaningful_event"),
    # Timezone
    "TimezoneService": ("advisor.services.timezone", "TimezoneService"),
    "get_timezone_service": ("advisor.services.timezone", "get_timezone_service"),
    "reset_timezone_service": ("advisor.services.timezone", "reset_timezone_service"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
