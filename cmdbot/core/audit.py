import logging

import hikari

from ..registry import CommandRecord
from .event_system import EventSystem


class CommandAuditLog:
    """Records custom command changes and invocations.

    Every event is written to the ``cmdbot.audit`` logger. Registrations and
    removals are also posted to ``channel_id`` when one is configured.
    """

    def __init__(self, rest: hikari.api.RESTClient | None = None, channel_id: int | None = None) -> None:
        self.rest = rest
        self.channel_id = channel_id
        self.audit_logger = logging.getLogger("cmdbot.audit")

    def subscribe(self, events: EventSystem) -> None:
        events.add_listener("command_registered", self.on_command_registered)
        events.add_listener("command_removed", self.on_command_removed)
        events.add_listener("command_invoked", self.on_command_invoked)

    async def on_command_registered(self, tenant_id: str, trigger: str, author_id: str) -> None:
        self.audit_logger.info(f"[{tenant_id}] {trigger} registered by {author_id}")
        await self._post(f"Custom command `{trigger}` registered by <@{author_id}>")

    async def on_command_removed(self, tenant_id: str, trigger: str) -> None:
        self.audit_logger.info(f"[{tenant_id}] {trigger} removed")
        await self._post(f"Custom command `{trigger}` removed")

    async def on_command_invoked(self, tenant_id: str, trigger: str, record: CommandRecord) -> None:
        self.audit_logger.debug(f"[{tenant_id}] {trigger} invoked ({record.invocation_count} total)")

    async def _post(self, content: str) -> None:
        if self.rest is None or self.channel_id is None:
            return
        # Failures propagate to the event system's error handler middleware
        await self.rest.create_message(self.channel_id, content, user_mentions=False)
