"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from engage.database.models import Base
from engage.services.ledger_service import LedgerStore

T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


def run_async(coro):
    """Run an async coroutine in a new event loop (no pytest-asyncio)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def touch_on_first_select(engine, store, user_id: int) -> dict:
    """Fire a concurrent ``touch_activity`` as soon as the next SELECT runs.

    The touch gets 0.2s to finish while the triggering call is still in
    progress; ``state["blocked"]`` records whether it had to wait.
    """
    state: dict = {}

    def on_execute(conn, cursor, statement, parameters, context, executemany):
        if state or not statement.lstrip().upper().startswith("SELECT"):
            return
        worker = threading.Thread(target=store.touch_activity, args=(user_id,))
        worker.start()
        worker.join(timeout=0.2)
        state["worker"] = worker
        state["blocked"] = worker.is_alive()

    event.listen(engine, "after_cursor_execute", on_execute)
    return state


class FakeClock:
    """Deterministic clock for the ledger; advance it by hand."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Engage tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(db_engine: Engine, clock: FakeClock) -> LedgerStore:
    """A ledger on the in-memory engine, driven by the fake clock."""
    return LedgerStore(db_engine, clock=clock)
