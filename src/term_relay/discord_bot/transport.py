"""
Discord transport for Term Relay
"""

from typing import Optional

import discord

from ..core.transport import SendOptions, Transport
from ..utils.logging_setup import get_logger

logger = get_logger('discord_transport')


class DiscordTransport(Transport):
    """Sends, edits and deletes messages through discord.py"""

    async def send(self, recipient: discord.abc.Messageable, text: str,
                   options: Optional[SendOptions] = None) -> discord.Message:
        options = options or SendOptions()
        message = await recipient.send(
            text,
            silent=options.silent,
            suppress_embeds=options.suppress_embeds
        )
        logger.debug(f"Sent message {message.id} ({len(text)} chars)")
        return message

    async def edit(self, handle: discord.Message, text: str,
                   options: Optional[SendOptions] = None) -> None:
        options = options or SendOptions()
        await handle.edit(content=text, suppress=options.suppress_embeds)

    async def delete(self, handle: discord.Message) -> None:
        await handle.delete()
        logger.debug(f"Deleted message {handle.id}")
