"""
engage.bot.core — Bot Instance & Cog Loader
============================================

**Why this file exists:**
Defines :class:`EngageBot`, a ``commands.Bot`` subclass that:

1. Carries the shared config (``bot.cfg``), ledger (``bot.store``),
   activity monitor (``bot.monitor``) and assistant relay
   (``bot.assistant``) so every Cog can reach them via ``self.bot``.
2. Loads every Cog in ``engage/bot/cogs/``.
3. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).
4. Delivers inactivity notices by DM (:meth:`notify_user`).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands

from engage.config import EngageConfig
from engage.services.activity_monitor import ActivityMonitor
from engage.services.assistant_service import AssistantRelay
from engage.services.ledger_service import LedgerStore

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "engage.bot.cogs.meta",
    "engage.bot.cogs.links",
    "engage.bot.cogs.admin",
    "engage.bot.cogs.assistant",
    "engage.bot.cogs.tasks",
]


class EngageBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`EngageConfig`.
    store:
        The process-wide :class:`LedgerStore`.
    assistant:
        The :class:`AssistantRelay` for free-text messages.
    """

    def __init__(
        self, cfg: EngageConfig, store: LedgerStore, assistant: AssistantRelay
    ) -> None:
        # MESSAGE_CONTENT is privileged (enable in the Developer Portal):
        # needed for prefix commands and the free-text relay.
        intents = discord.Intents.default()
        intents.message_content = True
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description=f"{cfg.community_name} — share links, earn points",
        )

        self.cfg = cfg
        self.store = store
        self.assistant = assistant
        self.monitor = ActivityMonitor(store, self.notify_user)

    # -----------------------------------------------------------------------
    # Notifications
    # -----------------------------------------------------------------------
    async def notify_user(self, user_id: int, text: str) -> None:
        """DM *text* to *user_id*.  Raises on delivery failure."""
        user = self.get_user(user_id)
        if user is None:
            user = await self.fetch_user(user_id)
        await user.send(text)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Called once before the bot connects to Discord.

        If any extension fails to load, we log the error but keep going —
        one broken Cog shouldn't take down the whole bot.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        try:
            if dev_guild_id:
                guild = discord.Object(id=int(dev_guild_id))
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %d commands globally", len(synced))
        except discord.HTTPException:
            logger.exception("Slash-command sync failed")

    async def close(self) -> None:
        """Graceful shutdown — sweep loops stop with their cog, then the relay closes."""
        logger.info("Bot shutting down…")
        await super().close()
        await self.assistant.close()
