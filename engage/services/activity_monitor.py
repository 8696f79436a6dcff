"""
engage.services.activity_monitor — Inactivity Sweeps
=====================================================

Two sweeps over the ``users`` table, driven by the loops in
``engage.bot.cogs.tasks``:

- **Warning sweep** (hourly, minute 0) — every user idle ≥ 48h who has
  not been warned yet is marked ``warned`` and sent :data:`WARNING_TEXT`.
- **Penalty sweep** (hourly, minute 30) — every user idle ≥ 72h loses
  :data:`INACTIVITY_PENALTY_AMOUNT` points and is sent
  :data:`PENALTY_TEXT`.  Nothing records that a penalty was applied, so
  a member who stays away is charged again on every sweep.

Both sweeps share one ``asyncio.Lock`` so they never overlap.  Each
sweep selects and mutates in a single ledger call under the writer
lock, so a touch cannot land between the two.  Ledger mutations are
committed before notifications go out; a failed DM is logged and does
not undo the mutation or stop the sweep.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from engage.constants import PENALTY_TEXT, WARNING_TEXT
from engage.database.engine import run_db
from engage.engine.policy import (
    INACTIVITY_PENALTY_AMOUNT,
    INACTIVITY_PENALTY_SECONDS,
    INACTIVITY_WARN_SECONDS,
)
from engage.services.ledger_service import LedgerStore

logger = logging.getLogger(__name__)

Notifier = Callable[[int, str], Awaitable[None]]


@dataclass
class SweepResult:
    """Summary of one sweep."""

    affected: list[int] = field(default_factory=list)
    notify_failed: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.affected)


class ActivityMonitor:
    """Applies warn/penalty transitions and sends the matching notices."""

    def __init__(self, store: LedgerStore, notify: Notifier) -> None:
        self.store = store
        self.notify = notify
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------
    async def _notify_all(self, user_ids: list[int], text: str, result: SweepResult) -> None:
        for user_id in user_ids:
            try:
                await self.notify(user_id, text)
            except Exception:
                logger.warning("Could not notify user %s", user_id, exc_info=True)
                result.notify_failed.append(user_id)

    # -------------------------------------------------------------------
    # Public sweeps
    # -------------------------------------------------------------------
    async def run_warning_sweep(self) -> SweepResult:
        """Warn every unwarned user idle for 48h or more."""
        async with self._lock:
            result = SweepResult(affected=await run_db(
                self.store.warn_inactive, INACTIVITY_WARN_SECONDS,
            ))
            await self._notify_all(result.affected, WARNING_TEXT, result)
        if result.count:
            logger.info("Warning sweep: %d user(s) warned", result.count)
        return result

    async def run_penalty_sweep(self) -> SweepResult:
        """Charge every user idle for 72h or more."""
        async with self._lock:
            result = SweepResult(affected=await run_db(
                self.store.penalize_inactive,
                INACTIVITY_PENALTY_SECONDS,
                INACTIVITY_PENALTY_AMOUNT,
            ))
            await self._notify_all(result.affected, PENALTY_TEXT, result)
        if result.count:
            logger.info("Penalty sweep: %d user(s) penalised", result.count)
        return result
