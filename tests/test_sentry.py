"""Tests for Sentry error tracking integration."""

from unittest.mock import MagicMock, patch

import advisor.sentry
from advisor.sentry import (
    _before_send,
    _scrub_dict,
    add_breadcrumb,
    capture_exception,
    flush,
    init_sentry,
    is_enabled,
    set_tag,
)


class TestSentryInit:
    """Test Sentry initialization."""

    def setup_method(self) -> None:
        advisor.sentry._initialized = False

    def teardown_method(self) -> None:
        advisor.sentry._initialized = False

    def test_is_enabled_before_init(self) -> None:
        assert is_enabled() is False

    def test_init_without_dsn(self) -> None:
        assert init_sentry(dsn=None) is False
        assert init_sentry(dsn="") is False
        assert is_enabled() is False

    def test_init_with_dsn(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            result = init_sentry(
                dsn="https://key@sentry.example.com/1",
                environment="staging",
                release="beauty-advisor-events@test",
            )

        assert result is True
        assert is_enabled() is True
        kwargs = mock_sdk.init.call_args.kwargs
        assert kwargs["environment"] == "staging"
        assert kwargs["release"] == "beauty-advisor-events@test"
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is _before_send

    def test_init_twice_is_noop(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            init_sentry(dsn="https://key@sentry.example.com/1", release="x")
            assert init_sentry(dsn="https://key@sentry.example.com/1", release="x") is True
        assert mock_sdk.init.call_count == 1


class TestSentryHelpersDisabled:
    """Helpers do nothing before initialization."""

    def setup_method(self) -> None:
        advisor.sentry._initialized = False

    def test_helpers_are_noops(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            set_tag("command", "parse")
            add_breadcrumb("cli parse", category="cli")
            assert capture_exception(ValueError("boom")) is None
            flush()
        mock_sdk.set_tag.assert_not_called()
        mock_sdk.add_breadcrumb.assert_not_called()
        mock_sdk.capture_exception.assert_not_called()
        mock_sdk.flush.assert_not_called()


class TestSentryHelpersEnabled:
    """Helpers forward to the SDK once initialized."""

    def setup_method(self) -> None:
        advisor.sentry._initialized = True

    def teardown_method(self) -> None:
        advisor.sentry._initialized = False

    def test_capture_exception(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            mock_sdk.capture_exception.return_value = "event-123"
            error = ValueError("boom")
            assert capture_exception(error) == "event-123"
        mock_sdk.capture_exception.assert_called_once_with(error)

    def test_add_breadcrumb(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            add_breadcrumb("resolved", category="resolver")
        mock_sdk.add_breadcrumb.assert_called_once_with(
            message="resolved", category="resolver", level="info", data={}
        )

    def test_set_tag_and_flush(self) -> None:
        with patch("advisor.sentry.sentry_sdk") as mock_sdk:
            set_tag("command", "enrich")
            flush(timeout=1.0)
        mock_sdk.set_tag.assert_called_once_with("command", "enrich")
        mock_sdk.flush.assert_called_once_with(timeout=1.0)


class TestScrubbing:
    """Test sensitive data scrubbing."""

    def test_scrub_dict_nested(self) -> None:
        data = {
            "api_key": "secret-value",
            "text": "in two weeks",
            "nested": {"Customer_Id": "003XYZ", "urgency": "This Month"},
        }
        _scrub_dict(data)
        assert data["api_key"] == "[REDACTED]"
        assert data["text"] == "in two weeks"
        assert data["nested"]["Customer_Id"] == "[REDACTED]"
        assert data["nested"]["urgency"] == "This Month"

    def test_before_send_scrubs_breadcrumbs(self) -> None:
        event = {
            "extra": {"token": "abc"},
            "breadcrumbs": {"values": [{"message": "x", "data": {"password": "p"}}]},
        }
        result = _before_send(event, {})
        assert result is not None
        assert result["extra"]["token"] == "[REDACTED]"
        assert result["breadcrumbs"]["values"][0]["data"]["password"] == "[REDACTED]"

    def test_before_send_drops_keyboard_interrupt(self) -> None:
        hint = {"exc_info": (KeyboardInterrupt, KeyboardInterrupt(), None)}
        assert _before_send({}, hint) is None

    def test_before_send_keeps_other_errors(self) -> None:
        event = {"message": "boom"}
        hint = {"exc_info": (ValueError, ValueError("boom"), MagicMock())}
        assert _before_send(event, hint) is event
