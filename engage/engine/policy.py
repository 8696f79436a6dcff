"""
engage.engine.policy — Points Policy
=====================================

Pure rules: what a post costs, what an interaction earns, and when a
quiet member gets warned or penalised.  No Discord I/O, no DB I/O.
"""

from __future__ import annotations

from engage.engine.actions import ActionKind

__all__ = [
    "BROWSE_LIMIT",
    "INACTIVITY_PENALTY_AMOUNT",
    "INACTIVITY_PENALTY_SECONDS",
    "INACTIVITY_WARN_SECONDS",
    "LINK_POST_COST",
    "REWARDS",
    "can_afford_post",
    "reward_for",
]

# ---------------------------------------------------------------------------
# Link posting
# ---------------------------------------------------------------------------
LINK_POST_COST = 1000

# How many links /browse shows
BROWSE_LIMIT = 10


def can_afford_post(balance: int) -> bool:
    """True when *balance* covers :data:`LINK_POST_COST`."""
    return balance >= LINK_POST_COST


# ---------------------------------------------------------------------------
# Interaction rewards
# ---------------------------------------------------------------------------
REWARDS: dict[ActionKind, int] = {
    ActionKind.LIKE: 200,
    ActionKind.COMMENT: 350,
    ActionKind.REPOST: 500,
}


def reward_for(kind: ActionKind | str | None) -> int:
    """Points earned for *kind*; 0 for anything outside :class:`ActionKind`."""
    if kind is None:
        return 0
    try:
        return REWARDS.get(ActionKind(kind), 0)
    except ValueError:
        return 0


# ---------------------------------------------------------------------------
# Inactivity
# ---------------------------------------------------------------------------
INACTIVITY_WARN_SECONDS = 172_800      # 48h
INACTIVITY_PENALTY_SECONDS = 259_200   # 72h
INACTIVITY_PENALTY_AMOUNT = 100
