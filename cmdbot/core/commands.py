"""Slash commands for managing custom commands."""

from __future__ import annotations

import logging
from typing import Any

import hikari
import lightbulb

from .dispatcher import EventDispatcher, InteractionEvent, InteractionKind

logger = logging.getLogger(__name__)

GUILD_ONLY_MESSAGE = "This command can only be used in a server!"


def build_interaction_event(ctx: lightbulb.Context, kind: InteractionKind, **params: str) -> InteractionEvent | None:
    if not ctx.guild_id:
        return None
    return InteractionEvent(kind=kind, tenant_id=str(ctx.guild_id), author_id=str(ctx.user.id), params=params)


async def dispatch(dispatcher: EventDispatcher, ctx: lightbulb.Context, kind: InteractionKind, **params: str) -> None:
    event = build_interaction_event(ctx, kind, **params)
    if event is None:
        await ctx.respond(GUILD_ONLY_MESSAGE, ephemeral=True)
        return

    logger.info(f"Slash command {kind.value} called by {ctx.user.username} in guild {event.tenant_id}")
    await dispatcher.handle_interaction(event, ctx)


def build_slash_commands(dispatcher: EventDispatcher, permission: hikari.Permissions) -> list[type[Any]]:
    """Create the management commands bound to ``dispatcher``."""

    class Register(
        lightbulb.SlashCommand,
        name="register",
        description="Add a new command in this server",
        default_member_permissions=permission,
    ):
        trigger = lightbulb.string("command", "The command for the message")
        output = lightbulb.string("output", "Output the bot should send when the command is invoked")

        @lightbulb.invoke
        async def invoke(self, ctx: lightbulb.Context) -> None:
            await dispatch(dispatcher, ctx, InteractionKind.REGISTER, command=self.trigger, output=self.output)

    class GetRegistered(
        lightbulb.SlashCommand,
        name="get_registered",
        description="Get all the registered commands on this server",
        default_member_permissions=permission,
    ):
        @lightbulb.invoke
        async def invoke(self, ctx: lightbulb.Context) -> None:
            await dispatch(dispatcher, ctx, InteractionKind.LIST)

    class RemoveCommand(
        lightbulb.SlashCommand,
        name="remove_command",
        description="Remove a command",
        default_member_permissions=permission,
    ):
        trigger = lightbulb.string("command", "The command to remove")

        @lightbulb.invoke
        async def invoke(self, ctx: lightbulb.Context) -> None:
            await dispatch(dispatcher, ctx, InteractionKind.REMOVE, command=self.trigger)

    return [Register, GetRegistered, RemoveCommand]
