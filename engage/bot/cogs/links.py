"""
engage.bot.cogs.links — Link Posting, Browsing & Reward Buttons
================================================================

- /droplink <url> <title> — spend 1000 points to share a link
- /browse                 — the ten newest links, each with
  👍 Like / 💬 Comment / 🔁 Repost buttons

Reward buttons are :class:`RewardButton` dynamic items: their
``custom_id`` (``like_42``) carries everything needed to handle a
press, so they keep working on messages sent before a restart.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from engage.constants import ACTION_EMOJI, action_label
from engage.database.engine import run_db
from engage.engine.actions import ActionKind, action_custom_id, parse_action
from engage.services import interaction_service
from engage.services.embeds import build_link_embed
from engage.services.interaction_service import Reply

if TYPE_CHECKING:
    from engage.bot.core import EngageBot

logger = logging.getLogger(__name__)


class RewardButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=r"(?P<kind>[a-z]+)_(?P<link_id>[0-9]+)",
):
    """A Like/Comment/Repost button bound to one link id."""

    def __init__(self, kind: ActionKind | str, link_id: int) -> None:
        # Unknown kinds still round-trip so a stale button answers with +0
        self.action = parse_action(f"{kind}_{link_id}")
        known = self.action.kind
        super().__init__(
            discord.ui.Button(
                label=action_label(known) if known else str(kind),
                emoji=ACTION_EMOJI[known] if known else None,
                style=discord.ButtonStyle.secondary,
                custom_id=action_custom_id(known, link_id) if known else f"{kind}_{link_id}",
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
        /,
    ) -> RewardButton:
        return cls(match["kind"], int(match["link_id"]))

    async def callback(self, interaction: discord.Interaction) -> None:
        bot: EngageBot = interaction.client  # type: ignore[assignment]
        outcome = await run_db(
            interaction_service.press,
            bot.store,
            interaction.user.id,
            interaction.user.display_name,
            self.custom_id,
        )
        logger.info(
            "Reward press %s by %s: +%d", self.custom_id, interaction.user.id, outcome.earned,
        )
        await interaction.response.send_message(outcome.ack, ephemeral=True)
        if interaction.channel is not None:
            await interaction.channel.send(outcome.broadcast)  # type: ignore[union-attr]


def build_reward_view(link_id: int) -> discord.ui.View:
    """Like / Comment / Repost row for one link."""
    view = discord.ui.View(timeout=None)
    for kind in ActionKind:
        view.add_item(RewardButton(kind, link_id))
    return view


class Links(commands.Cog, name="Links"):
    """Paid link posting and the browse feed."""

    def __init__(self, bot: EngageBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /droplink
    # -------------------------------------------------------------------
    @commands.hybrid_command(  # type: ignore[arg-type]
        name="droplink",
        description="Spend 1000 points to share a link.",
    )
    @app_commands.describe(url="The link to share", title="A title for the link")
    async def droplink(self, ctx: commands.Context, url: str, *, title: str) -> None:
        reply = await run_db(
            interaction_service.droplink,
            self.bot.store,
            ctx.author.id,
            ctx.author.display_name,
            url,
            title,
            self.bot.cfg.bot_prefix,
        )
        await ctx.send(reply.text, ephemeral=reply.ephemeral)

    @droplink.error
    async def droplink_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(
                f"Usage: {self.bot.cfg.bot_prefix}droplink <url> <title>", ephemeral=True,
            )
            return
        raise error

    # -------------------------------------------------------------------
    # /browse
    # -------------------------------------------------------------------
    @commands.hybrid_command(  # type: ignore[arg-type]
        name="browse",
        description="Browse the newest links and earn points by engaging.",
    )
    async def browse(self, ctx: commands.Context) -> None:
        result = await run_db(interaction_service.browse, self.bot.store)
        if isinstance(result, Reply):
            await ctx.send(result.text, ephemeral=result.ephemeral)
            return

        for card in result:
            await ctx.send(embed=build_link_embed(card), view=build_reward_view(card.link_id))


async def setup(bot: EngageBot) -> None:
    bot.add_dynamic_items(RewardButton)
    await bot.add_cog(Links(bot))
