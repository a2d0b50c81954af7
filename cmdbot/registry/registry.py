from __future__ import annotations

import logging

from config.settings import settings

from ..exceptions import InvalidCommand, MalformedRecord
from ..storage import StorageManager
from .models import CommandRecord

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Per-guild mapping of trigger text to :class:`CommandRecord`.

    The registry is the only writer of command records. Every operation may
    raise :class:`~cmdbot.exceptions.StorageUnavailable`; absence is reported
    through return values instead.
    """

    def __init__(self, storage: StorageManager, *, max_output_length: int | None = None) -> None:
        self.storage = storage
        self.max_output_length = max_output_length or settings.max_output_length

    async def register(self, tenant_id: str, trigger: str, output: str, author_id: str) -> None:
        """Create or overwrite ``trigger``, resetting its invocation count."""
        self._validate(trigger, output)
        record = CommandRecord(output=output, author_id=str(author_id), invocation_count=0)

        async with self.storage.lock(tenant_id, trigger):
            await self.storage.hset(tenant_id, trigger, record.serialize())

        logger.info(f"Registered command {trigger!r} in guild {tenant_id} by {author_id}")

    async def invoke(self, tenant_id: str, trigger: str) -> CommandRecord | None:
        """Count one use of ``trigger`` and return the updated record."""
        async with self.storage.lock(tenant_id, trigger):
            record = await self._load(tenant_id, trigger)
            if record is None:
                return None

            record = record.increment()
            await self.storage.hset(tenant_id, trigger, record.serialize())

        logger.debug(f"Invoked command {trigger!r} in guild {tenant_id} ({record.invocation_count} uses)")
        return record

    async def get(self, tenant_id: str, trigger: str) -> CommandRecord | None:
        return await self._load(tenant_id, trigger)

    async def list(self, tenant_id: str) -> list[tuple[str, CommandRecord]]:
        raw_entries = await self.storage.hgetall(tenant_id)

        entries = []
        for trigger, raw in sorted(raw_entries.items()):
            try:
                entries.append((trigger, CommandRecord.deserialize(raw)))
            except MalformedRecord as e:
                logger.warning(f"Skipping malformed command {trigger!r} in guild {tenant_id}: {e}")
        return entries

    async def remove(self, tenant_id: str, trigger: str) -> bool:
        async with self.storage.lock(tenant_id, trigger):
            removed = await self.storage.hdel(tenant_id, trigger)

        if removed:
            logger.info(f"Removed command {trigger!r} from guild {tenant_id}")
        return removed

    async def _load(self, tenant_id: str, trigger: str) -> CommandRecord | None:
        raw = await self.storage.hget(tenant_id, trigger)
        if raw is None:
            return None

        try:
            return CommandRecord.deserialize(raw)
        except MalformedRecord as e:
            logger.warning(f"Ignoring malformed command {trigger!r} in guild {tenant_id}: {e}")
            return None

    def _validate(self, trigger: str, output: str) -> None:
        if not trigger or not trigger.strip():
            raise InvalidCommand("The command text cannot be empty.")
        if not output or not output.strip():
            raise InvalidCommand("The command output cannot be empty.")
        if len(output) > self.max_output_length:
            raise InvalidCommand(f"The command output cannot be longer than {self.max_output_length} characters.")
