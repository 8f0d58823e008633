import argparse
import json
import logging
import sys
from datetime import date

from advisor.config import settings
from advisor.sentry import add_breadcrumb, capture_exception, init_sentry, is_enabled, set_tag
from advisor.sentry import flush as sentry_flush


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def parse_text(text: str, today: date | None = None) -> None:
    from advisor.services.relative_dates import get_relative_date_resolver

    resolver = get_relative_date_resolver()
    result = resolver.parse(text, today)

    if result.date is None:
        print("No relative date found")
    else:
        print(f"Date: {result.date.isoformat()} ({result.date.strftime('%A')})")
        print(f"Phrase: {result.relative_text}")
    print(f"Urgency: {result.urgency.value}")


def enrich_text(text: str, today: date | None = None, as_json: bool = False) -> None:
    from advisor.services.relative_dates import enrich_event_with_date

    fields = enrich_event_with_date(text, today)

    if as_json:
        print(json.dumps(fields.to_dict(), indent=2))
        return

    print(f"  relative_time_text: {fields.relative_time_text or '-'}")
    print(f"  event_date: {fields.event_date or '-'}")
    print(f"  urgency: {fields.urgency.value}")


def check_config() -> None:
    from advisor.services.timezone import get_timezone_service

    print("Advisor Events Configuration Check\n")

    tz_service = get_timezone_service()
    tz_ok = tz_service.default_timezone == settings.user_timezone

    checks = [
        (f"User timezone ({settings.user_timezone})", tz_ok),
        ("Sentry DSN", settings.has_sentry),
        ("Sentry error tracking", is_enabled()),
    ]

    for name, configured in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")

    print()
    print(f"Today in {tz_service.default_timezone}: {tz_service.today().isoformat()}")
    if not tz_ok:
        print("Unknown USER_TIMEZONE, dates are resolved in UTC. See .env.example.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Beauty advisor meaningful-event dates")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_parser = subparsers.add_parser("parse", help="Resolve a relative date phrase")
    parse_parser.add_argument("text", help="Free text, e.g. 'her birthday is in two weeks'")
    parse_parser.add_argument("--today", type=_iso_date, help="Reference date (YYYY-MM-DD)")

    enrich_parser = subparsers.add_parser("enrich", help="Show event temporal fields")
    enrich_parser.add_argument("text", help="Meaningful event description")
    enrich_parser.add_argument("--today", type=_iso_date, help="Reference date (YYYY-MM-DD)")
    enrich_parser.add_argument("--json", action="store_true", help="Print as JSON")

    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args(argv)

    setup_logging()

    # Initialize Sentry for error tracking (disabled if no DSN configured)
    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        set_tag("command", args.command or "help")
        add_breadcrumb(f"cli {args.command}", category="cli")
        if args.command == "parse":
            parse_text(args.text, args.today)
        elif args.command == "enrich":
            enrich_text(args.text, args.today, as_json=args.json)
        elif args.command == "check":
            check_config()
        else:
            parser.print_help()
            sys.exit(1)
    except Exception as e:
        capture_exception(e)
        raise
    finally:
        # Flush any pending Sentry events before exit
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    main()
