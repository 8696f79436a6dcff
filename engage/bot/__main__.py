"""
engage.bot.__main__ — Entry point for ``python -m engage.bot``
==============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Build the ledger store and the assistant relay.
5. Create the EngageBot and hand it config + store + relay.
6. Start the bot (blocking — runs the asyncio event loop).

Run with::

    python -m engage.bot
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from engage.bot.core import EngageBot
from engage.config import load_config
from engage.database.engine import create_db_engine, init_db
from engage.services.assistant_service import AssistantRelay
from engage.services.ledger_service import LedgerStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("engage")


def main() -> None:
    """Bootstrap and run the Engage bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — Community: %s", cfg.community_name)
    if cfg.admin_user_id is None:
        logger.warning("No admin configured (ADMIN_ID); /stats will answer nobody.")

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)

    # 4. Ledger + assistant.
    store = LedgerStore(engine)
    assistant = AssistantRelay(
        model=cfg.assistant_model,
        timeout=cfg.assistant_timeout_seconds,
    )

    # 5. Bot.
    bot = EngageBot(cfg=cfg, store=store, assistant=assistant)

    # 6. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting Engage bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
