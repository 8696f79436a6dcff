"""
engage.bot.cogs.tasks — Inactivity Sweep Loops
===============================================

Scheduled jobs that run on ``discord.ext.tasks`` loops:

- **Warning sweep** — every hour on the hour (UTC), warns members idle
  for 48h.
- **Penalty sweep** — every hour at half past (UTC), charges members
  idle for 72h.

These tasks fire in the bot process (not a separate worker) to keep
the deployment simple.  A failed sweep is logged and retried on the
next tick.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING

from discord.ext import commands, tasks

if TYPE_CHECKING:
    from engage.bot.core import EngageBot

logger = logging.getLogger(__name__)

WARNING_TIMES = [dt.time(hour=h, minute=0, tzinfo=dt.UTC) for h in range(24)]
PENALTY_TIMES = [dt.time(hour=h, minute=30, tzinfo=dt.UTC) for h in range(24)]


class PeriodicTasks(commands.Cog):
    """Cog for the scheduled inactivity sweeps."""

    def __init__(self, bot: EngageBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        """Start task loops when the cog is loaded."""
        self.warning_loop.start()
        self.penalty_loop.start()

    async def cog_unload(self) -> None:
        """Cancel task loops on unload."""
        self.warning_loop.cancel()
        self.penalty_loop.cancel()

    # -------------------------------------------------------------------
    # Warning sweep — :00 every hour
    # -------------------------------------------------------------------
    @tasks.loop(time=WARNING_TIMES)
    async def warning_loop(self):
        """Warn members idle for 48 hours."""
        try:
            await self.bot.monitor.run_warning_sweep()
        except Exception:
            logger.exception("Warning sweep failed", extra={"task": "warning"})

    @warning_loop.before_loop
    async def _wait_warning(self):
        await self.bot.wait_until_ready()

    # -------------------------------------------------------------------
    # Penalty sweep — :30 every hour
    # -------------------------------------------------------------------
    @tasks.loop(time=PENALTY_TIMES)
    async def penalty_loop(self):
        """Charge members idle for 72 hours."""
        try:
            await self.bot.monitor.run_penalty_sweep()
        except Exception:
            logger.exception("Penalty sweep failed", extra={"task": "penalty"})

    @penalty_loop.before_loop
    async def _wait_penalty(self):
        await self.bot.wait_until_ready()


async def setup(bot: EngageBot) -> None:
    await bot.add_cog(PeriodicTasks(bot))
