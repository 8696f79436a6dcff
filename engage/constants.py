"""
engage.constants — Shared Constants & Message Texts
=====================================================

Single source of truth for user-facing strings and button presentation.
Import from here instead of duplicating in cogs and services.
"""

from __future__ import annotations

from engage.engine.actions import ActionKind
from engage.engine.policy import INACTIVITY_PENALTY_AMOUNT, REWARDS

# ---------------------------------------------------------------------------
# Reward buttons (used by /browse)
# ---------------------------------------------------------------------------
ACTION_EMOJI: dict[ActionKind, str] = {
    ActionKind.LIKE: "\U0001f44d",      # 👍
    ActionKind.COMMENT: "\U0001f4ac",   # 💬
    ActionKind.REPOST: "\U0001f501",    # 🔁
}


def action_label(kind: ActionKind) -> str:
    """Button label, e.g. ``"Like +200"``."""
    return f"{kind.value.capitalize()} +{REWARDS[kind]}"


# ---------------------------------------------------------------------------
# Inactivity notifications
# ---------------------------------------------------------------------------
WARNING_TEXT = (
    "⚠️ You’ve been inactive for over 48 hours. "
    f"Engage soon to avoid losing {INACTIVITY_PENALTY_AMOUNT} points!"
)
PENALTY_TEXT = f"❌ You lost {INACTIVITY_PENALTY_AMOUNT} points due to inactivity."

# ---------------------------------------------------------------------------
# Assistant relay
# ---------------------------------------------------------------------------
FALLBACK_TEXT = "⚠️ Sorry, I couldn’t respond right now. Try again later."

ASSISTANT_SYSTEM_PROMPT = (
    "You are an AI assistant inside a Discord engagement bot. "
    "Help users understand and manage their engagement points. "
    "Reference their points and suggest actions like liking, commenting, or reposting."
)

NO_LINKS_TEXT = "No links available yet."
