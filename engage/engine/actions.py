"""
engage.engine.actions — Reward Actions and Button IDs
======================================================

Every reward button under a browsed link carries a ``custom_id`` of the
form ``"<kind>_<linkId>"`` (``like_42``, ``repost_7``).  This module owns
that format in both directions.

The parser fails closed: an unknown kind parses to ``kind=None`` (which
earns zero points) and a malformed link id parses to ``link_id=None``.
It never raises.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = ["ActionKind", "ParsedAction", "action_custom_id", "parse_action"]

SEPARATOR = "_"


class ActionKind(enum.StrEnum):
    """Interactions that earn points on someone else's link."""
    LIKE = "like"
    COMMENT = "comment"
    REPOST = "repost"


@dataclass(frozen=True, slots=True)
class ParsedAction:
    """Result of parsing a button ``custom_id``."""

    kind: ActionKind | None
    link_id: int | None
    raw_kind: str = ""


def action_custom_id(kind: ActionKind, link_id: int) -> str:
    """Build the ``custom_id`` for a reward button."""
    return f"{kind.value}{SEPARATOR}{link_id}"


def parse_action(custom_id: str) -> ParsedAction:
    """Split ``"<kind>_<linkId>"`` on the first separator."""
    raw_kind, _, raw_id = (custom_id or "").partition(SEPARATOR)
    raw_kind = raw_kind.strip().lower()

    try:
        kind: ActionKind | None = ActionKind(raw_kind)
    except ValueError:
        kind = None

    link_id = int(raw_id) if raw_id.isdigit() else None
    return ParsedAction(kind=kind, link_id=link_id, raw_kind=raw_kind)
