"""
engage.services.ledger_service — The Points Ledger
===================================================

:class:`LedgerStore` is the only code that writes ``users`` and
``links``.  Cogs, the interaction service and the activity monitor all
receive the same instance (built once in ``engage.bot.__main__``) and
call it through ``run_db``.

Single-writer discipline:
    ``run_db`` runs calls on a thread pool, so two handlers can reach
    the store at the same time.  Every write transaction takes the
    store's ``RLock`` first.  Compound operations that must not
    interleave — "check balance then debit then insert link" and
    "credit then touch" — are single methods inside one transaction.

Time:
    All timestamps come from the injected ``clock`` (aware UTC).  Tests
    pass a fixed clock; production uses ``datetime.now(UTC)``.

Errors:
    SQLAlchemy errors propagate.  There is no local recovery for a
    broken store.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from engage.database.engine import get_session
from engage.database.models import Link, User
from engage.engine.actions import ActionKind
from engage.engine.policy import LINK_POST_COST, can_afford_post, reward_for

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Results of compound operations
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PostResult:
    """Outcome of :meth:`LedgerStore.post_link`."""

    ok: bool
    balance: int            # balance after the attempt
    required: int = LINK_POST_COST
    link: Link | None = None


@dataclass(frozen=True, slots=True)
class CreditResult:
    """Outcome of :meth:`LedgerStore.credit_interaction`."""

    kind: ActionKind | None
    earned: int
    balance: int
    display_name: str | None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class LedgerStore:
    """Persisted balances, activity state and the link log."""

    def __init__(self, engine: Engine, clock: Clock | None = None) -> None:
        self.engine = engine
        self.clock: Clock = clock or utcnow
        self._write_lock = threading.RLock()

    # -------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------
    def _get_or_create(self, session: Session, user_id: int, display_name: str | None) -> User:
        user = session.get(User, user_id)
        if user is None:
            user = User(
                id=user_id,
                display_name=display_name or None,
                points=0,
                warned=False,
                last_active_at=self.clock(),
            )
            session.add(user)
            session.flush()
            logger.info("New user %s (%s)", user_id, display_name)
        elif display_name and user.display_name != display_name:
            user.display_name = display_name
        return user

    def get_or_create_user(self, user_id: int, display_name: str | None = None) -> User:
        """Return the user, creating it with a zero balance on first contact."""
        with self._write_lock, get_session(self.engine) as session:
            user = self._get_or_create(session, user_id, display_name)
            session.flush()
            session.expunge(user)
            return user

    def get_user(self, user_id: int) -> User | None:
        with get_session(self.engine) as session:
            user = session.get(User, user_id)
            if user is not None:
                session.expunge(user)
            return user

    def touch_activity(self, user_id: int) -> None:
        """Mark the user active now and clear any inactivity warning."""
        with self._write_lock, get_session(self.engine) as session:
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_active_at=self.clock(), warned=False)
            )

    def adjust_points(self, user_id: int, delta: int) -> int | None:
        """Add *delta* (either sign) to the balance.  No floor is applied.

        Returns the new balance, or ``None`` if the user does not exist.
        """
        with self._write_lock, get_session(self.engine) as session:
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(points=User.points + delta)
            )
            return session.scalar(select(User.points).where(User.id == user_id))

    def mark_warned(self, user_ids: Iterable[int]) -> int:
        """Set ``warned`` on every id given; returns rows touched."""
        ids = list(user_ids)
        if not ids:
            return 0
        with self._write_lock, get_session(self.engine) as session:
            result = session.execute(
                update(User).where(User.id.in_(ids)).values(warned=True)
            )
            return result.rowcount  # type: ignore[return-value]

    def users_inactive_since(
        self, threshold_seconds: int, only_unwarned: bool = False
    ) -> list[User]:
        """Users idle for at least *threshold_seconds*, oldest activity first."""
        cutoff = self.clock() - timedelta(seconds=threshold_seconds)
        stmt = select(User).where(User.last_active_at <= cutoff)
        if only_unwarned:
            stmt = stmt.where(User.warned.is_(False))
        stmt = stmt.order_by(User.last_active_at, User.id)
        with get_session(self.engine) as session:
            users = list(session.scalars(stmt).all())
            session.expunge_all()
            return users

    # -------------------------------------------------------------------
    # Inactivity transitions (select and mutate under one lock)
    # -------------------------------------------------------------------
    def _inactive_ids(
        self, session: Session, cutoff: datetime, only_unwarned: bool
    ) -> list[int]:
        stmt = select(User.id).where(User.last_active_at <= cutoff)
        if only_unwarned:
            stmt = stmt.where(User.warned.is_(False))
        return list(session.scalars(stmt.order_by(User.last_active_at, User.id)).all())

    def warn_inactive(self, threshold_seconds: int) -> list[int]:
        """Mark every unwarned user idle for *threshold_seconds* as warned.

        Returns the ids that were marked.
        """
        cutoff = self.clock() - timedelta(seconds=threshold_seconds)
        with self._write_lock, get_session(self.engine) as session:
            ids = self._inactive_ids(session, cutoff, only_unwarned=True)
            if ids:
                session.execute(
                    update(User)
                    .where(User.id.in_(ids), User.last_active_at <= cutoff)
                    .values(warned=True)
                )
            return ids

    def penalize_inactive(self, threshold_seconds: int, amount: int) -> list[int]:
        """Deduct *amount* from every user idle for *threshold_seconds*.

        Returns the ids that were charged.
        """
        cutoff = self.clock() - timedelta(seconds=threshold_seconds)
        with self._write_lock, get_session(self.engine) as session:
            ids = self._inactive_ids(session, cutoff, only_unwarned=False)
            if not ids:
                return ids
            session.execute(
                update(User)
                .where(User.id.in_(ids), User.last_active_at <= cutoff)
                .values(points=User.points - amount)
            )
            for user_id, balance in session.execute(
                select(User.id, User.points).where(User.id.in_(ids))
            ):
                logger.info(
                    "Inactivity penalty: user %s -%d (balance now %d)", user_id, amount, balance,
                )
            return ids

    # -------------------------------------------------------------------
    # Links
    # -------------------------------------------------------------------
    def _insert_link(self, session: Session, owner_id: int, url: str, title: str) -> Link:
        link = Link(owner_id=owner_id, url=url, title=title, created_at=self.clock())
        session.add(link)
        session.flush()
        return link

    def record_link(self, owner_id: int, url: str, title: str) -> Link:
        """Append a link row.  Callers wanting the paid flow use :meth:`post_link`."""
        with self._write_lock, get_session(self.engine) as session:
            link = self._insert_link(session, owner_id, url, title)
            session.expunge(link)
            return link

    def recent_links(self, limit: int = 10) -> list[Link]:
        """Newest links first, at most *limit*."""
        with get_session(self.engine) as session:
            links = list(
                session.scalars(
                    select(Link)
                    .order_by(Link.created_at.desc(), Link.id.desc())
                    .limit(limit)
                ).all()
            )
            session.expunge_all()
            return links

    # -------------------------------------------------------------------
    # Compound operations (one transaction each)
    # -------------------------------------------------------------------
    def post_link(
        self, owner_id: int, display_name: str | None, url: str, title: str
    ) -> PostResult:
        """Charge :data:`LINK_POST_COST` and record the link, or refuse.

        The affordability check, debit, insert and activity touch share
        one transaction under the writer lock; a refused post changes
        nothing.
        """
        with self._write_lock, get_session(self.engine) as session:
            user = self._get_or_create(session, owner_id, display_name)
            if not can_afford_post(user.points):
                logger.info(
                    "Post refused for %s: %d < %d", owner_id, user.points, LINK_POST_COST,
                )
                return PostResult(ok=False, balance=user.points)

            user.points -= LINK_POST_COST
            link = self._insert_link(session, owner_id, url, title)
            user.last_active_at = self.clock()
            user.warned = False
            session.flush()
            session.expunge(link)
            logger.info("Link %d posted by %s (balance now %d)", link.id, owner_id, user.points)
            return PostResult(ok=True, balance=user.points, link=link)

    def credit_interaction(
        self, user_id: int, display_name: str | None, kind: ActionKind | None
    ) -> CreditResult:
        """Credit the reward for *kind* (0 when unknown) and touch activity."""
        earned = reward_for(kind)
        with self._write_lock, get_session(self.engine) as session:
            user = self._get_or_create(session, user_id, display_name)
            user.points += earned
            user.last_active_at = self.clock()
            user.warned = False
            session.flush()
            logger.debug("Credited %d to %s for %s", earned, user_id, kind)
            return CreditResult(
                kind=kind,
                earned=earned,
                balance=user.points,
                display_name=user.display_name,
            )

    # -------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------
    def count_users(self) -> int:
        with get_session(self.engine) as session:
            return session.scalar(select(func.count()).select_from(User)) or 0

    def count_links(self) -> int:
        with get_session(self.engine) as session:
            return session.scalar(select(func.count()).select_from(Link)) or 0

    def sum_all_points(self) -> int:
        with get_session(self.engine) as session:
            return int(session.scalar(select(func.sum(User.points))) or 0)
