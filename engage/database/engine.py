"""
engage.database.engine — Database Connection & Async Helper
============================================================

**Why this file exists:**
Discord bots run on an ``asyncio`` event loop.  SQLAlchemy is
**synchronous** — if we call the DB directly from an async context, the
entire bot freezes until the query returns.

The bridge:

    1. An event fires in Discord  (async world).
    2. The Cog calls ``await run_db(some_function, arg1, arg2)``.
    3. ``run_db`` ships the synchronous function to a **thread pool** via
       ``asyncio.to_thread()``.
    4. The DB work happens on a background thread — the event loop stays free.
    5. The result is awaited back in the Cog, which can then reply to the user.

Worker threads may overlap, so writers serialise themselves inside
:class:`engage.services.ledger_service.LedgerStore`.

Usage::

    from engage.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async Cog method:
    user = await run_db(store.get_or_create_user, user_id, display_name)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from engage.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

DEFAULT_DATABASE_URL = "sqlite:///engagebot.db"


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine`.

    *url* defaults to the ``DATABASE_URL`` env var, then to a local
    ``engagebot.db`` SQLite file next to the working directory.

    SQLite connections are shared with worker threads (``run_db``), so
    ``check_same_thread`` is disabled.  Server databases get a small
    pre-pinged pool sized for a single bot process.
    """
    url = url or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            url,
            echo=False,        # Set True for SQL debugging
            pool_size=5,
            max_overflow=5,
            pool_pre_ping=True,   # Reconnect stale connections automatically
            pool_timeout=10,      # Fail after 10s instead of hanging forever
            pool_recycle=3600,
        )
    logger.info("Database engine created → %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`engage.database.models`.

    This is safe to call on every startup — ``CREATE TABLE IF NOT EXISTS``
    under the hood.

    .. note::

        Managed deployments can run ``alembic upgrade head`` instead;
        ``create_all`` stays as the safety net for local and test runs.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Objects stay loaded after commit (``expire_on_commit=False``) so they
    can be handed back to the event loop once the session is closed.

    Usage::

        with get_session(engine) as session:
            session.add(User(id=123, display_name="drew", last_active_at=now))
            # commit happens automatically on block exit
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Every DB call in a Cog should go through this wrapper::

        result = await run_db(store.recent_links, 10)

    Under the hood it calls :func:`asyncio.to_thread`, which schedules
    *func* on the default ``ThreadPoolExecutor`` so the bot's event loop
    is never blocked.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
