"""Sentry error tracking for the advisor event tools.

The CLI calls init_sentry() once at startup with the configured DSN. Every
other helper here does nothing until that call succeeds, so running without
a DSN (local development, tests) needs no special handling.

Typical use around a command:

    set_tag("command", "enrich")
    try:
        enrich_meaningful_event(event)
    except Exception as e:
        capture_exception(e)
        raise
    finally:
        flush()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

if TYPE_CHECKING:
    from sentry_sdk._types import Event, Hint

logger = logging.getLogger(__name__)

DISTRIBUTION = "beauty-advisor-events"

# Keys whose values never leave the process
SENSITIVE_KEYS = frozenset({
    "token",
    "api_key",
    "apikey",
    "secret",
    "password",
    "authorization",
    "bearer",
    "sentry_dsn",
    "customer_id",
})

_initialized = False


def _default_release() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return f"{DISTRIBUTION}@{version(DISTRIBUTION)}"
    except PackageNotFoundError:
        return f"{DISTRIBUTION}@unknown"


def init_sentry(
    dsn: str | None = None,
    environment: str = "production",
    release: str | None = None,
    traces_sample_rate: float = 0.0,
    debug: bool = False,
) -> bool:
    """Start the Sentry client.

    Args:
        dsn: Project DSN. Tracking stays off when empty.
        environment: Deployment name reported with each event.
        release: Release string; derived from the installed distribution if None.
        traces_sample_rate: Fraction of transactions to trace.
        debug: Turn on the SDK's own debug output.

    Returns:
        True when the client is running, False when tracking is off.
    """
    global _initialized

    if _initialized:
        logger.debug("Sentry already initialized")
        return True

    if not dsn:
        logger.info("No SENTRY_DSN configured, error tracking disabled")
        return False

    release = release or _default_release()

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        debug=debug,
        # INFO and above become breadcrumbs, ERROR and above become events
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=_before_send,
    )

    _initialized = True
    logger.info(f"Sentry initialized: environment={environment}, release={release}")
    return True


def _before_send(event: Event, hint: Hint) -> Event | None:
    """Drop interrupted runs and redact sensitive keys."""
    exc_info = hint.get("exc_info")
    if exc_info and exc_info[0].__name__ == "KeyboardInterrupt":
        return None

    if "extra" in event:
        _scrub_dict(cast(dict[str, Any], event["extra"]))

    breadcrumbs = cast(dict[str, Any], event.get("breadcrumbs") or {})
    for breadcrumb in breadcrumbs.get("values", []):
        if "data" in breadcrumb:
            _scrub_dict(breadcrumb["data"])

    return event


def _scrub_dict(data: dict[str, Any]) -> None:
    """Redact sensitive keys in place, descending into nested dicts."""
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS:
            data[key] = "[REDACTED]"
        elif isinstance(value, dict):
            _scrub_dict(value)


def set_tag(key: str, value: str) -> None:
    """Tag subsequent events, e.g. with the CLI command being run."""
    if _initialized:
        sentry_sdk.set_tag(key, value)


def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: dict[str, Any] | None = None,
) -> None:
    """Record a step that will be attached to the next error event."""
    if _initialized:
        sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})


def capture_exception(exception: BaseException | None = None) -> str | None:
    """Report an exception; returns the event ID, or None when tracking is off."""
    if not _initialized:
        return None
    return sentry_sdk.capture_exception(exception)


def flush(timeout: float = 2.0) -> None:
    """Wait up to timeout seconds for queued events to be sent."""
    if _initialized:
        sentry_sdk.flush(timeout=timeout)


def is_enabled() -> bool:
    return _initialized
