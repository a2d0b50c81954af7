"""hikari adapters for the dispatcher's collaborator interfaces."""

from __future__ import annotations

import functools
import logging
from typing import Any

import hikari

from .dispatcher import EmbedReply, MessageEvent, ReplyContent, TextReply, UserProfile

logger = logging.getLogger(__name__)

LIST_COLOR = hikari.Color(0xFFA500)


@functools.singledispatch
def render_reply(content: Any) -> dict[str, Any]:
    """Build the keyword arguments hikari expects for a reply."""
    raise TypeError(f"Unsupported reply content: {type(content).__name__}")


@render_reply.register
def _(content: TextReply) -> dict[str, Any]:
    return {"content": content.text}


@render_reply.register
def _(content: EmbedReply) -> dict[str, Any]:
    embed = hikari.Embed(title=content.title, color=LIST_COLOR)
    for embed_field in content.fields:
        embed.add_field(embed_field.name, embed_field.value, inline=embed_field.inline)
    if content.footer:
        embed.set_footer(content.footer)
    return {"embed": embed}


def message_event_from_hikari(event: hikari.GuildMessageCreateEvent) -> MessageEvent:
    return MessageEvent(
        tenant_id=str(event.guild_id) if event.guild_id else None,
        author_id=str(event.author.id),
        is_bot=event.author.is_bot,
        text=event.content or "",
        channel=event.channel_id,
    )


class GatewayReplySink:
    """Sends replies either into a channel or as an interaction response."""

    def __init__(self, rest: hikari.api.RESTClient) -> None:
        self.rest = rest

    async def send_reply(self, target: Any, content: ReplyContent) -> None:
        kwargs = render_reply(content)

        # Command contexts answer the interaction, anything else is a channel
        if hasattr(target, "respond"):
            await target.respond(ephemeral=content.ephemeral, **kwargs)
        else:
            await self.rest.create_message(target, **kwargs)


class RestUserDirectory:
    def __init__(self, rest: hikari.api.RESTClient) -> None:
        self.rest = rest

    async def fetch_user(self, user_id: str) -> UserProfile:
        user = await self.rest.fetch_user(int(user_id))
        return UserProfile(display_name=user.display_name or user.username)
