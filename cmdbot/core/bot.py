import logging

import hikari
import lightbulb

from config.settings import settings

from ..exceptions import StorageUnavailable
from ..middleware import ErrorHandlerMiddleware, LoggingMiddleware
from ..registry import CommandRegistry
from ..storage import StorageManager
from .audit import CommandAuditLog
from .commands import build_slash_commands
from .dispatcher import EventDispatcher
from .event_system import EventSystem
from .gateway import GatewayReplySink, RestUserDirectory, message_event_from_hikari

logger = logging.getLogger(__name__)


class DiscordBot:
    def __init__(self, storage: StorageManager | None = None) -> None:
        intents = hikari.Intents.GUILDS | hikari.Intents.GUILD_MESSAGES | hikari.Intents.MESSAGE_CONTENT
        self.hikari_bot = hikari.GatewayBot(token=settings.discord_token, intents=intents)
        self.command_client = lightbulb.client_from_app(self.hikari_bot)
        self.hikari_bot.subscribe(hikari.StartingEvent, self.command_client.start)

        self.storage = storage or StorageManager()
        self.registry = CommandRegistry(self.storage)

        self.event_system = EventSystem()
        self.event_system.add_middleware(LoggingMiddleware())
        self.error_handler = ErrorHandlerMiddleware()
        self.event_system.add_middleware(self.error_handler)
        self.audit_log = CommandAuditLog(self.hikari_bot.rest, settings.audit_channel_id)
        self.audit_log.subscribe(self.event_system)

        self.dispatcher = EventDispatcher(
            self.registry,
            RestUserDirectory(self.hikari_bot.rest),
            GatewayReplySink(self.hikari_bot.rest),
            self.event_system,
        )

        self.is_ready = False

        self._register_slash_commands()
        self._setup_event_listeners()

    def _register_slash_commands(self) -> None:
        permission = hikari.Permissions[settings.command_permission.upper()]
        for command in build_slash_commands(self.dispatcher, permission):
            self.command_client.register(command)
            logger.debug(f"Registered slash command class {command.__name__}")

    def _setup_event_listeners(self) -> None:
        self.hikari_bot.subscribe(hikari.StartingEvent, self.on_starting)
        self.hikari_bot.subscribe(hikari.ShardReadyEvent, self.on_ready)
        self.hikari_bot.subscribe(hikari.StoppingEvent, self.on_stopping)
        self.hikari_bot.subscribe(hikari.GuildMessageCreateEvent, self.on_message_create)

    async def on_starting(self, event: hikari.StartingEvent) -> None:
        logger.info("Bot is starting, connecting to storage...")
        try:
            await self.storage.connect()
        except StorageUnavailable as e:
            # Commands keep failing per event until Redis becomes reachable
            logger.critical(f"Command store unavailable at startup: {e}")

    async def on_ready(self, event: hikari.ShardReadyEvent) -> None:
        if not self.is_ready:
            logger.info(f"Bot is ready! Logged in as {event.my_user}")
            self.is_ready = True

    async def on_stopping(self, event: hikari.StoppingEvent) -> None:
        logger.info("Bot is stopping...")
        await self.storage.close()

    async def on_message_create(self, event: hikari.GuildMessageCreateEvent) -> None:
        await self.dispatcher.handle_message(message_event_from_hikari(event))

    def run(self) -> None:
        try:
            logger.info("Starting Discord bot...")
            self.hikari_bot.run()
        except KeyboardInterrupt:
            logger.info("Bot stopped by user")
        except Exception as e:
            logger.error(f"Bot crashed: {e}")
            raise
