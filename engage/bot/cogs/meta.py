"""
engage.bot.cogs.meta — Greeting & Profile Commands
===================================================

Hybrid commands (slash and prefix) for user self-service:
- /start   — create your account on first use and see your balance
- /profile — balance and last activity
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord.ext import commands

from engage.database.engine import run_db
from engage.services import interaction_service

if TYPE_CHECKING:
    from engage.bot.core import EngageBot


class Meta(commands.Cog, name="Meta"):
    """Greeting and profile lookups."""

    def __init__(self, bot: EngageBot) -> None:
        self.bot = bot

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="start",
        description="Join the points economy and see your balance.",
    )
    async def start(self, ctx: commands.Context) -> None:
        reply = await run_db(
            interaction_service.start,
            self.bot.store,
            ctx.author.id,
            ctx.author.display_name,
            self.bot.cfg.bot_prefix,
        )
        await ctx.send(reply.text, ephemeral=reply.ephemeral)

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="profile",
        description="View your points and last activity.",
    )
    async def profile(self, ctx: commands.Context) -> None:
        reply = await run_db(
            interaction_service.profile,
            self.bot.store,
            ctx.author.id,
            ctx.author.display_name,
        )
        await ctx.send(reply.text, ephemeral=reply.ephemeral)


async def setup(bot: EngageBot) -> None:
    await bot.add_cog(Meta(bot))
