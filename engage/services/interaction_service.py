"""
engage.services.interaction_service — Command Logic
=====================================================

What each command and button *does*, independent of Discord.  Every
function takes the :class:`LedgerStore` explicitly, runs synchronously
(call it through ``run_db``) and returns plain reply objects that the
cogs render.  No function here sends anything.

Commands:
- ``start``    — greeting + balance
- ``profile``  — name, balance, last activity
- ``droplink`` — paid link post (1000 points)
- ``browse``   — the ten newest links, one card each
- ``press``    — reward button under a link card
- ``stats``    — admin-only aggregates (``None`` for everyone else)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from engage.constants import NO_LINKS_TEXT
from engage.engine.actions import parse_action
from engage.engine.policy import BROWSE_LIMIT
from engage.services.ledger_service import LedgerStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reply shapes
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Reply:
    """One message to send back.  Text uses Discord markdown."""

    text: str
    ephemeral: bool = False


@dataclass(frozen=True, slots=True)
class LinkCard:
    """One /browse entry; the cog attaches the reward buttons for ``link_id``."""

    link_id: int
    title: str
    url: str

    @property
    def text(self) -> str:
        return f"**{self.title}**\n{self.url}"


@dataclass(frozen=True, slots=True)
class PressOutcome:
    """Ephemeral acknowledgement for the presser plus a public broadcast."""

    earned: int
    balance: int
    ack: str
    broadcast: str


@dataclass(frozen=True, slots=True)
class Stats:
    users: int
    links: int
    total_points: int

    @property
    def text(self) -> str:
        return (
            "📈 **Bot Stats**\n"
            f"Users: {self.users}\n"
            f"Links: {self.links}\n"
            f"Total Points: {self.total_points}"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def parse_droplink_args(text: str) -> tuple[str, str] | None:
    """Split ``"<url> <title…>"``; the title is the rest of the text.

    Returns ``None`` unless both parts are present.
    """
    parts = (text or "").strip().split(maxsplit=1)
    if len(parts) < 2:
        return None
    url, title = parts[0], parts[1].strip()
    if not title:
        return None
    return url, title


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "never"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
def start(
    store: LedgerStore, user_id: int, display_name: str | None, prefix: str = "/"
) -> Reply:
    user = store.get_or_create_user(user_id, display_name)
    return Reply(
        f"👋 Welcome, {display_name or 'friend'}!\n"
        f"You have {user.points} points.\n"
        f"Use {prefix}browse to view links or {prefix}droplink to share yours."
    )


def profile(store: LedgerStore, user_id: int, display_name: str | None) -> Reply:
    user = store.get_or_create_user(user_id, display_name)
    return Reply(
        f"📊 Profile for {user.display_name or 'unknown'}\n"
        f"Points: {user.points}\n"
        f"Last active: {format_timestamp(user.last_active_at)}"
    )


def droplink(
    store: LedgerStore,
    user_id: int,
    display_name: str | None,
    url: str,
    title: str,
    prefix: str = "/",
) -> Reply:
    """Post a link if the balance covers :data:`LINK_POST_COST`."""
    url = (url or "").strip()
    title = (title or "").strip()
    if not url or not title:
        return Reply(f"Usage: {prefix}droplink <url> <title>", ephemeral=True)

    result = store.post_link(user_id, display_name, url, title)
    if not result.ok:
        return Reply(
            f"❌ Not enough points. You need {result.required} points, "
            f"but you only have {result.balance}."
        )
    return Reply(f"✅ Your link has been posted:\n\n**{title}**\n{url}")


def droplink_from_text(
    store: LedgerStore,
    user_id: int,
    display_name: str | None,
    text: str,
    prefix: str = "/",
) -> Reply:
    """``droplink`` for a raw ``"<url> <title…>"`` argument string."""
    parsed = parse_droplink_args(text)
    if parsed is None:
        return Reply(f"Usage: {prefix}droplink <url> <title>", ephemeral=True)
    return droplink(store, user_id, display_name, parsed[0], parsed[1], prefix)


def browse(store: LedgerStore, limit: int = BROWSE_LIMIT) -> list[LinkCard] | Reply:
    """Newest links as cards, or a single "no links" reply."""
    links = store.recent_links(limit)
    if not links:
        return Reply(NO_LINKS_TEXT)
    return [LinkCard(link_id=ln.id, title=ln.title, url=ln.url) for ln in links]


def press(
    store: LedgerStore, user_id: int, display_name: str | None, custom_id: str
) -> PressOutcome:
    """Credit the presser for the action encoded in *custom_id*."""
    action = parse_action(custom_id)
    if action.kind is None:
        logger.debug("Unknown reward action %r from %s", action.raw_kind, user_id)

    result = store.credit_interaction(user_id, display_name, action.kind)
    name = result.display_name or "User"
    return PressOutcome(
        earned=result.earned,
        balance=result.balance,
        ack=f"+{result.earned} points!",
        broadcast=f"{name} earned {result.earned} points!",
    )


def stats(store: LedgerStore, is_admin: bool) -> Stats | None:
    """Aggregates for the administrator; ``None`` means "say nothing"."""
    if not is_admin:
        return None
    return Stats(
        users=store.count_users(),
        links=store.count_links(),
        total_points=store.sum_all_points(),
    )

