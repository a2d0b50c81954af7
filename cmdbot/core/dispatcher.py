"""Translate gateway events into registry calls and replies."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from config.settings import settings

from ..exceptions import InvalidCommand, StorageUnavailable
from ..registry import CommandRecord, CommandRegistry
from .event_system import EventSystem

logger = logging.getLogger(__name__)

# Discord embed limits
MAX_EMBED_FIELDS = 25
MAX_FIELD_NAME_LENGTH = 256
MAX_FIELD_VALUE_LENGTH = 1024
MAX_EMBED_LENGTH = 6000
# Enough for "<n> more command(s) not shown"
MAX_FOOTER_LENGTH = 64

LIST_TITLE = "List of commands"
STORAGE_FAILURE_MESSAGE = "Something went wrong while talking to the command store. Please try again later."


class InteractionKind(enum.Enum):
    REGISTER = "register"
    LIST = "list"
    REMOVE = "remove"


@dataclass(slots=True, frozen=True)
class MessageEvent:
    tenant_id: str | None
    author_id: str
    is_bot: bool
    text: str
    channel: Any


@dataclass(slots=True, frozen=True)
class InteractionEvent:
    kind: InteractionKind
    tenant_id: str
    author_id: str
    params: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class UserProfile:
    display_name: str


@dataclass(slots=True, frozen=True)
class TextReply:
    text: str
    ephemeral: bool = False


@dataclass(slots=True, frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(slots=True, frozen=True)
class EmbedReply:
    title: str
    fields: tuple[EmbedField, ...] = ()
    footer: str | None = None
    ephemeral: bool = False


ReplyContent = TextReply | EmbedReply


class ReplySink(Protocol):
    async def send_reply(self, target: Any, content: ReplyContent) -> None: ...


class UserDirectory(Protocol):
    async def fetch_user(self, user_id: str) -> UserProfile: ...


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class EventDispatcher:
    """Stateless bridge between gateway events and the command registry.

    Every interaction receives exactly one reply. A chat message receives a
    reply only when its text is a registered trigger.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        users: UserDirectory,
        replies: ReplySink,
        events: EventSystem | None = None,
        *,
        notify_storage_failures: bool | None = None,
    ) -> None:
        self.registry = registry
        self.users = users
        self.replies = replies
        self.events = events or EventSystem()
        if notify_storage_failures is None:
            notify_storage_failures = settings.notify_storage_failures
        self.notify_storage_failures = notify_storage_failures

    async def handle_message(self, event: MessageEvent) -> bool:
        """Fire the custom command matching ``event.text``, if any.

        Returns True when a reply was sent.
        """
        if event.is_bot or not event.tenant_id or not event.text:
            return False

        try:
            record = await self.registry.invoke(event.tenant_id, event.text)
        except StorageUnavailable as e:
            logger.error(f"Could not look up command in guild {event.tenant_id}: {e}")
            if self.notify_storage_failures:
                await self.replies.send_reply(event.channel, TextReply(STORAGE_FAILURE_MESSAGE))
                return True
            return False

        if record is None:
            return False

        await self.replies.send_reply(event.channel, TextReply(record.output))
        await self.events.emit("command_invoked", event.tenant_id, event.text, record)
        return True

    async def handle_interaction(self, event: InteractionEvent, target: Any) -> None:
        handlers = {
            InteractionKind.REGISTER: self._register,
            InteractionKind.LIST: self._list,
            InteractionKind.REMOVE: self._remove,
        }

        try:
            reply = await handlers[event.kind](event)
        except StorageUnavailable as e:
            logger.error(f"{event.kind.value} failed in guild {event.tenant_id}: {e}")
            reply = TextReply(STORAGE_FAILURE_MESSAGE, ephemeral=True)

        await self.replies.send_reply(target, reply)

    async def _register(self, event: InteractionEvent) -> ReplyContent:
        trigger = event.params.get("command", "")
        output = event.params.get("output", "")

        try:
            await self.registry.register(event.tenant_id, trigger, output, event.author_id)
        except InvalidCommand as e:
            return TextReply(str(e), ephemeral=True)

        await self.events.emit("command_registered", event.tenant_id, trigger, event.author_id)
        return TextReply("Command added!")

    async def _list(self, event: InteractionEvent) -> ReplyContent:
        entries = await self.registry.list(event.tenant_id)
        if not entries:
            return TextReply("No command is registered on this server :(")

        # Room left for field text once the title and the footer are accounted for
        budget = MAX_EMBED_LENGTH - len(LIST_TITLE) - MAX_FOOTER_LENGTH
        fields = []
        for trigger, record in entries[:MAX_EMBED_FIELDS]:
            display_name = await self._display_name(record.author_id)
            embed_field = EmbedField(
                name=_truncate(trigger, MAX_FIELD_NAME_LENGTH),
                value=_truncate(self._describe(record, display_name), MAX_FIELD_VALUE_LENGTH),
            )
            size = len(embed_field.name) + len(embed_field.value)
            if size > budget:
                break
            budget -= size
            fields.append(embed_field)

        footer = None
        if len(entries) > len(fields):
            footer = f"{len(entries) - len(fields)} more command(s) not shown"

        return EmbedReply(title=LIST_TITLE, fields=tuple(fields), footer=footer)

    async def _remove(self, event: InteractionEvent) -> ReplyContent:
        trigger = event.params.get("command", "")

        if not await self.registry.remove(event.tenant_id, trigger):
            return TextReply("No such command exists", ephemeral=True)

        await self.events.emit("command_removed", event.tenant_id, trigger)
        return TextReply(f"Removed `{trigger}` command")

    async def _display_name(self, user_id: str) -> str:
        try:
            profile = await self.users.fetch_user(user_id)
        except Exception as e:
            logger.warning(f"Could not resolve user {user_id}: {e}")
            return f"Unknown user ({user_id})"
        return profile.display_name

    @staticmethod
    def _describe(record: CommandRecord, display_name: str) -> str:
        return (
            f"Added by: {display_name}\n"
            f"Invoked {record.invocation_count} time(s)\n"
            f"Output: {record.output}"
        )
