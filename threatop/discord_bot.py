from __future__ import annotations

import asyncio
import logging

import discord

from threatop.config import Settings
from threatop.host import ChatHost

log = logging.getLogger(__name__)


def run_discord_bot(host: ChatHost, settings: Settings) -> None:
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN is required to run the Discord bot")

    intents = discord.Intents.default()
    intents.message_content = True
    client = discord.Client(intents=intents)

    @client.event
    async def on_ready() -> None:
        user_name = str(client.user) if client.user else "unknown"
        log.info("logged_in_as=%s", user_name)

    @client.event
    async def on_message(message) -> None:
        if message.author == client.user:
            return
        channel_name = getattr(message.channel, "name", "")
        if channel_name != settings.bot_channel:
            return
        reply = await asyncio.to_thread(
            host.handle_message,
            str(message.id),
            str(message.author.id),
            message.author.display_name,
            message.content,
            channel_name,
        )
        if reply is not None:
            await message.channel.send(reply.message)

    @client.event
    async def on_message_edit(before, after) -> None:
        if getattr(after.channel, "name", "") != settings.bot_channel:
            return
        reply = await asyncio.to_thread(host.rerender, str(after.id))
        log.info("message_rerendered message=%s ok=%s", after.id, reply.ok)

    log.info("starting_discord_bot")
    client.run(settings.discord_token)
