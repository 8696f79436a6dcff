"""
engage.bot.cogs.admin — Admin Commands
=======================================

- /stats — user count, link count, total points in circulation

Only the configured administrator (``ADMIN_ID`` / ``admin_user_id``)
gets an answer.  Anyone else is ignored without a reply, so the command
reveals nothing about who runs the bot.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord.ext import commands

from engage.database.engine import run_db
from engage.services import interaction_service
from engage.services.embeds import build_stats_embed

if TYPE_CHECKING:
    from engage.bot.core import EngageBot

logger = logging.getLogger(__name__)


class Admin(commands.Cog, name="Admin"):
    """Administrator-only readouts."""

    def __init__(self, bot: EngageBot) -> None:
        self.bot = bot

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="stats",
        description="Economy totals (administrator only).",
    )
    async def stats(self, ctx: commands.Context) -> None:
        is_admin = self.bot.cfg.is_admin(ctx.author.id)
        result = await run_db(interaction_service.stats, self.bot.store, is_admin)
        if result is None:
            logger.debug("Ignored /stats from non-admin %s", ctx.author.id)
            return
        await ctx.send(embed=build_stats_embed(result, self.bot.cfg.community_name))


async def setup(bot: EngageBot) -> None:
    await bot.add_cog(Admin(bot))
