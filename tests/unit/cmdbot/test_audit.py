"""Tests for the custom command audit log."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cmdbot.core.audit import CommandAuditLog
from cmdbot.core.event_system import EventSystem
from cmdbot.middleware import LoggingMiddleware
from cmdbot.registry import CommandRecord


@pytest.fixture
def mock_rest():
    rest = MagicMock()
    rest.create_message = AsyncMock()
    return rest


class TestCommandAuditLog:
    """Test CommandAuditLog functionality."""

    @pytest.mark.asyncio
    async def test_registration_posted_to_channel(self, mock_rest):
        audit_log = CommandAuditLog(mock_rest, channel_id=999)

        await audit_log.on_command_registered("123", "!hi", "42")

        mock_rest.create_message.assert_called_once_with(
            999, "Custom command `!hi` registered by <@42>", user_mentions=False
        )

    @pytest.mark.asyncio
    async def test_removal_posted_to_channel(self, mock_rest):
        audit_log = CommandAuditLog(mock_rest, channel_id=999)

        await audit_log.on_command_removed("123", "!hi")

        mock_rest.create_message.assert_called_once_with(999, "Custom command `!hi` removed", user_mentions=False)

    @pytest.mark.asyncio
    async def test_no_channel_only_logs(self, mock_rest):
        audit_log = CommandAuditLog(mock_rest)

        with patch.object(audit_log, "audit_logger") as audit_logger:
            await audit_log.on_command_registered("123", "!hi", "42")

        audit_logger.info.assert_called_once_with("[123] !hi registered by 42")
        mock_rest.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_invocations_not_posted(self, mock_rest):
        audit_log = CommandAuditLog(mock_rest, channel_id=999)
        record = CommandRecord(output="Hello!", author_id="42", invocation_count=3)

        await audit_log.on_command_invoked("123", "!hi", record)

        mock_rest.create_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_subscribed_events_run_middleware(self, mock_rest):
        event_system = EventSystem()
        middleware = LoggingMiddleware()
        event_system.add_middleware(middleware)
        audit_log = CommandAuditLog(mock_rest, channel_id=999)
        audit_log.subscribe(event_system)

        with patch("cmdbot.middleware.logging.logger") as middleware_logger:
            await event_system.emit("command_removed", "123", "!hi")

        assert middleware_logger.debug.call_count == 2
        mock_rest.create_message.assert_called_once()
