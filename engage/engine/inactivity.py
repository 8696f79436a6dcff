"""
engage.engine.inactivity — Inactivity State Machine
====================================================

Each member is in one of three states, derived from how long ago they
last did something that counts as activity and whether they have
already been warned::

    ACTIVE ──(≥48h, not warned)──▶ WARNED ──(≥72h)──▶ PENALIZED
      ▲                                                   │
      └──────────────── touch_activity() ─────────────────┘

``PENALIZED`` has no flag of its own: every penalty sweep that still
finds the member past 72h deducts again.  Only new activity (which
resets ``last_active_at``) stops it.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from engage.engine.policy import INACTIVITY_PENALTY_SECONDS, INACTIVITY_WARN_SECONDS

__all__ = [
    "InactivityState",
    "classify",
    "elapsed_seconds",
    "should_penalize",
    "should_warn",
]


class InactivityState(enum.StrEnum):
    ACTIVE = "active"
    WARNED = "warned"
    PENALIZED = "penalized"


def elapsed_seconds(last_active_at: datetime, now: datetime) -> float:
    """Seconds between *last_active_at* and *now*.

    SQLite hands back naive datetimes; those are read as UTC.
    """
    if last_active_at.tzinfo is None:
        last_active_at = last_active_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (now - last_active_at).total_seconds()


def should_warn(elapsed: float, warned: bool) -> bool:
    return not warned and elapsed >= INACTIVITY_WARN_SECONDS


def should_penalize(elapsed: float) -> bool:
    return elapsed >= INACTIVITY_PENALTY_SECONDS


def classify(elapsed: float, warned: bool) -> InactivityState:
    """Map elapsed inactivity and the warned flag onto a state."""
    if should_penalize(elapsed):
        return InactivityState.PENALIZED
    if warned or should_warn(elapsed, warned):
        return InactivityState.WARNED
    return InactivityState.ACTIVE
