"""Pytest configuration and shared fixtures."""

import logging
import os
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest

os.environ.setdefault("DISCORD_TOKEN", "test-token")

from cmdbot.core.dispatcher import EventDispatcher, UserProfile  # noqa: E402
from cmdbot.core.event_system import EventSystem  # noqa: E402
from cmdbot.registry import CommandRegistry  # noqa: E402
from cmdbot.storage import StorageManager  # noqa: E402

# Disable logging during tests
logging.disable(logging.CRITICAL)


@pytest.fixture
def fake_redis():
    """In-process Redis with its own isolated data set."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=False)


@pytest.fixture
def storage(fake_redis):
    """Storage manager wired to the fake Redis server."""
    return StorageManager("redis://unused", key_prefix="", timeout=1.0, client=fake_redis)


@pytest.fixture
def registry(storage):
    return CommandRegistry(storage, max_output_length=2000)


@pytest.fixture
def mock_users():
    """User directory that resolves every id to a display name."""
    users = MagicMock()
    users.fetch_user = AsyncMock(side_effect=lambda user_id: UserProfile(display_name=f"user-{user_id}"))
    return users


@pytest.fixture
def mock_replies():
    replies = MagicMock()
    replies.send_reply = AsyncMock()
    return replies


@pytest.fixture
def event_system():
    return EventSystem()


@pytest.fixture
def dispatcher(registry, mock_users, mock_replies, event_system):
    return EventDispatcher(registry, mock_users, mock_replies, event_system, notify_storage_failures=False)


@pytest.fixture
def mock_lightbulb_context():
    """Mock slash command context."""
    ctx = MagicMock()
    ctx.guild_id = 123456789
    ctx.user = MagicMock(id=111111111, username="testuser")
    ctx.respond = AsyncMock()
    return ctx
