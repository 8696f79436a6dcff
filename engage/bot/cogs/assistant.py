"""
engage.bot.cogs.assistant — Free-Text Relay
============================================

Any message that is not a command is handed to the
:class:`AssistantRelay` together with the sender's balance; the model's
answer goes back to the same channel verbatim.

Gates: bots are ignored, as is anything starting with the command
prefix or ``/``.  In guilds the relay can be limited to
``assistant_channel_ids``; DMs are always answered.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from engage.constants import FALLBACK_TEXT
from engage.database.engine import run_db

if TYPE_CHECKING:
    from engage.bot.core import EngageBot

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


class Assistant(commands.Cog, name="Assistant"):
    """Relays free text to the assistant model."""

    def __init__(self, bot: EngageBot) -> None:
        self.bot = bot

    def should_relay(self, message: discord.Message) -> bool:
        if message.author.bot:
            return False
        text = (message.content or "").strip()
        if not text:
            return False
        if text.startswith("/") or text.startswith(self.bot.cfg.bot_prefix):
            return False
        allowed = self.bot.cfg.assistant_channel_ids
        if message.guild is not None and allowed and message.channel.id not in allowed:
            return False
        return True

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if not self.should_relay(message):
            return

        try:
            user = await run_db(
                self.bot.store.get_or_create_user,
                message.author.id,
                message.author.display_name,
            )
        except Exception:
            logger.exception("Assistant relay: could not load user %s", message.author.id)
            await message.channel.send(FALLBACK_TEXT)
            return

        async with message.channel.typing():
            answer = await self.bot.assistant.reply(
                user.display_name, user.points, message.content.strip(),
            )
        # Discord caps messages at 2000 characters
        for start in range(0, len(answer), MAX_MESSAGE_LENGTH):
            await message.channel.send(answer[start:start + MAX_MESSAGE_LENGTH])


async def setup(bot: EngageBot) -> None:
    await bot.add_cog(Assistant(bot))
