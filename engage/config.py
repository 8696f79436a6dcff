"""
engage.config — YAML Configuration Loader
==========================================

**Why this file exists:**
Secrets (bot token, OpenAI key, database URL) come from the environment
via ``.env``.  Everything else that an operator may want to tune without
touching code lives in ``config.yaml`` and is parsed here into an
immutable, typed object.

The file is optional: a fresh checkout runs with the defaults below.
The administrator identity can be given either as ``admin_user_id`` in
YAML or as the ``ADMIN_ID`` environment variable (the env var wins).

Usage::

    from engage.config import load_config

    cfg = load_config()          # reads ./config.yaml if present
    print(cfg.bot_prefix)        # "/"
    print(cfg.admin_user_id)     # 123456789012345678 or None
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ASSISTANT_MODEL = "gpt-4o-mini"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EngageConfig:
    """Immutable configuration loaded from ``config.yaml`` and the environment."""

    # Identity
    community_name: str = "Engage"

    # Discord
    bot_prefix: str = "/"

    # Admin — the single identity allowed to run /stats
    admin_user_id: int | None = None

    # Assistant relay
    assistant_model: str = DEFAULT_ASSISTANT_MODEL
    assistant_timeout_seconds: float = 30.0
    # Empty → relay free text everywhere the bot can read
    assistant_channel_ids: frozenset[int] = field(default_factory=frozenset)

    def is_admin(self, user_id: int) -> bool:
        """True when *user_id* is the configured administrator."""
        return self.admin_user_id is not None and int(user_id) == self.admin_user_id


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _optional_int(value: object, key: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config key {key!r} must be an integer, got {value!r}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> EngageConfig:
    """Read *path* (if it exists) and the environment into an :class:`EngageConfig`.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    ValueError
        If a numeric key holds something that is not a number, or the
        file's top level is not a mapping.
    """
    config_path = Path(path)
    raw: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping")
        raw = loaded
    else:
        logger.info("No %s found, using default settings", config_path)

    admin_user_id = _optional_int(raw.get("admin_user_id"), "admin_user_id")
    env_admin = os.getenv("ADMIN_ID")
    if env_admin:
        admin_user_id = _optional_int(env_admin, "ADMIN_ID")

    channel_ids = frozenset(
        int(ch) for ch in (raw.get("assistant_channel_ids") or [])
    )

    timeout = raw.get("assistant_timeout_seconds", 30.0)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Config key 'assistant_timeout_seconds' must be a number, got {timeout!r}"
        ) from exc

    return EngageConfig(
        community_name=str(raw.get("community_name", "Engage")),
        bot_prefix=str(raw.get("bot_prefix", "/")),
        admin_user_id=admin_user_id,
        assistant_model=str(raw.get("assistant_model", DEFAULT_ASSISTANT_MODEL)),
        assistant_timeout_seconds=timeout,
        assistant_channel_ids=channel_ids,
    )
