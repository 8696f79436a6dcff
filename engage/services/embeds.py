"""
engage.services.embeds — Discord embed builders
================================================

Embed construction for link cards and the admin stats readout lives
here so cogs only need to supply data — no layout concerns.
"""

from __future__ import annotations

import discord

from engage.services.interaction_service import LinkCard, Stats


def build_link_embed(card: LinkCard) -> discord.Embed:
    """One /browse card.  The title links straight to the URL when it looks like one."""
    url = card.url if card.url.startswith(("http://", "https://")) else None
    embed = discord.Embed(
        title=card.title[:256],
        url=url,
        description=card.url,
        color=discord.Color.blurple(),
    )
    embed.set_footer(text=f"Link #{card.link_id}")
    return embed


def build_stats_embed(stats: Stats, community_name: str) -> discord.Embed:
    """Admin-only aggregate readout."""
    embed = discord.Embed(
        title="\U0001f4c8 Bot Stats",
        color=discord.Color.gold(),
    )
    embed.add_field(name="Users", value=str(stats.users), inline=True)
    embed.add_field(name="Links", value=str(stats.links), inline=True)
    embed.add_field(name="Total Points", value=f"{stats.total_points:,}", inline=True)
    embed.set_footer(text=community_name)
    return embed
