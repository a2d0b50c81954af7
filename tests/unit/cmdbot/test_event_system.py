"""Tests for event system functionality."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cmdbot.core.event_system import EventSystem


class TestEventSystem:
    """Test EventSystem functionality."""

    def test_add_and_remove_listener(self):
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "test_listener"

        event_system.add_listener("command_invoked", listener)
        assert event_system.get_listeners("command_invoked") == [listener]

        event_system.remove_listener("command_invoked", listener)
        assert event_system.get_listeners("command_invoked") == []

    def test_remove_nonexistent_listener(self):
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "test_listener"

        # Should not raise an exception
        event_system.remove_listener("command_invoked", listener)

    def test_listen_decorator(self):
        event_system = EventSystem()

        @event_system.listen("command_removed")
        async def on_removed(tenant_id, trigger):
            pass

        assert on_removed in event_system.get_listeners("command_removed")
        assert event_system.get_all_events() == ["command_removed"]

    @pytest.mark.asyncio
    async def test_emit_calls_async_and_sync_listeners(self):
        event_system = EventSystem()
        async_listener = AsyncMock()
        async_listener.__name__ = "async_listener"
        sync_listener = MagicMock()
        sync_listener.__name__ = "sync_listener"

        event_system.add_listener("command_registered", async_listener)
        event_system.add_listener("command_registered", sync_listener)
        await event_system.emit("command_registered", "guild1", "!hi", "user42")

        async_listener.assert_called_once_with("guild1", "!hi", "user42")
        sync_listener.assert_called_once_with("guild1", "!hi", "user42")

    @pytest.mark.asyncio
    async def test_emit_without_listeners_skips_middleware(self):
        event_system = EventSystem()
        middleware = AsyncMock()
        event_system.add_middleware(middleware)

        await event_system.emit("command_invoked")

        middleware.assert_not_called()

    @pytest.mark.asyncio
    async def test_listener_error_is_recorded_for_middleware(self):
        event_system = EventSystem()
        seen = {}

        async def middleware(event_context, phase):
            if phase == "post":
                seen.update(event_context)

        async def failing(*args):
            raise RuntimeError("boom")

        good = AsyncMock()
        good.__name__ = "good"
        event_system.add_middleware(middleware)
        event_system.add_listener("command_invoked", failing)
        event_system.add_listener("command_invoked", good)

        await event_system.emit("command_invoked", "guild1")

        assert isinstance(seen["error"], RuntimeError)
        good.assert_called_once_with("guild1")

    @pytest.mark.asyncio
    async def test_middleware_can_stop_event(self):
        event_system = EventSystem()
        listener = AsyncMock()
        listener.__name__ = "listener"

        async def blocker(event_context, phase):
            return False

        event_system.add_middleware(blocker)
        event_system.add_listener("command_invoked", listener)
        await event_system.emit("command_invoked")

        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_middleware_errors_do_not_block_listeners(self):
        event_system = EventSystem()
        listener = AsyncMock()
        listener.__name__ = "listener"

        async def broken(event_context, phase):
            raise ValueError("bad middleware")

        event_system.add_middleware(broken)
        event_system.add_listener("command_invoked", listener)
        await event_system.emit("command_invoked")

        listener.assert_called_once()
