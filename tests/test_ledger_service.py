"""
tests/test_ledger_service.py — Ledger Store Integration Tests
==============================================================

Uses an in-memory SQLite database and a fake clock via the shared
conftest fixtures.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from conftest import touch_on_first_select
from sqlalchemy import select
from sqlalchemy.orm import Session

from engage.database.models import Link, User
from engage.engine.actions import ActionKind
from engage.engine.policy import LINK_POST_COST


def _points(engine, user_id: int) -> int:
    with Session(engine) as session:
        return session.scalar(select(User.points).where(User.id == user_id))


class TestUsers:
    def test_first_contact_creates_zero_balance(self, store, clock):
        user = store.get_or_create_user(1, "alice")
        assert user.points == 0
        assert user.warned is False
        assert user.display_name == "alice"
        assert user.last_active_at.replace(tzinfo=None) == clock.now.replace(tzinfo=None)
        assert store.count_users() == 1

    def test_existing_user_is_returned(self, store):
        store.get_or_create_user(1, "alice")
        store.adjust_points(1, 300)
        again = store.get_or_create_user(1, "alice")
        assert again.points == 300
        assert store.count_users() == 1

    def test_display_name_hint_refreshes_name(self, store):
        store.get_or_create_user(1, "alice")
        assert store.get_or_create_user(1, "alice_v2").display_name == "alice_v2"
        # No hint keeps what is stored
        assert store.get_or_create_user(1).display_name == "alice_v2"

    def test_missing_display_name(self, store):
        assert store.get_or_create_user(5).display_name is None


class TestAdjustPoints:
    def test_positive_and_negative_deltas(self, store, db_engine):
        store.get_or_create_user(1, "a")
        assert store.adjust_points(1, 500) == 500
        assert store.adjust_points(1, -200) == 300
        assert _points(db_engine, 1) == 300

    def test_balance_may_go_negative(self, store):
        store.get_or_create_user(1, "a")
        assert store.adjust_points(1, -100) == -100

    def test_unknown_user(self, store):
        assert store.adjust_points(404, 10) is None


class TestTouchActivity:
    def test_touch_resets_timestamp_and_warning(self, store, clock):
        store.get_or_create_user(1, "a")
        store.mark_warned([1])
        clock.advance(hours=50)
        store.touch_activity(1)
        user = store.get_user(1)
        assert user.warned is False
        assert user.last_active_at.replace(tzinfo=None) == clock.now.replace(tzinfo=None)

    def test_touch_is_idempotent(self, store):
        store.get_or_create_user(1, "a")
        store.touch_activity(1)
        store.touch_activity(1)
        assert store.get_user(1).warned is False


class TestLinks:
    def test_record_link_assigns_increasing_ids(self, store):
        store.get_or_create_user(1, "a")
        first = store.record_link(1, "http://a", "A")
        second = store.record_link(1, "http://b", "B")
        assert second.id > first.id
        assert store.count_links() == 2

    def test_recent_links_newest_first_and_bounded(self, store, clock):
        store.get_or_create_user(1, "a")
        for i in range(12):
            store.record_link(1, f"http://x/{i}", f"T{i}")
            clock.advance(minutes=1)

        links = store.recent_links(10)
        assert len(links) == 10
        assert [ln.title for ln in links] == [f"T{i}" for i in range(11, 1, -1)]

    def test_recent_links_same_timestamp_uses_id(self, store):
        store.get_or_create_user(1, "a")
        a = store.record_link(1, "http://a", "A")
        b = store.record_link(1, "http://b", "B")
        assert [ln.id for ln in store.recent_links(10)] == [b.id, a.id]

    def test_recent_links_empty(self, store):
        assert store.recent_links(10) == []


class TestPostLink:
    def test_refused_without_funds(self, store, db_engine):
        result = store.post_link(1, "a", "http://x", "Title")
        assert not result.ok
        assert result.balance == 0
        assert result.required == LINK_POST_COST
        assert result.link is None
        assert store.count_links() == 0
        # The attempt still creates the user
        assert _points(db_engine, 1) == 0

    def test_success_debits_and_records(self, store, db_engine):
        store.get_or_create_user(1, "a")
        store.adjust_points(1, 1500)

        result = store.post_link(1, "a", "http://x", "My Title")

        assert result.ok
        assert result.balance == 500
        assert result.link.url == "http://x"
        assert result.link.title == "My Title"
        assert result.link.owner_id == 1
        assert _points(db_engine, 1) == 500
        assert store.count_links() == 1

    def test_success_touches_activity(self, store, clock):
        store.get_or_create_user(1, "a")
        store.adjust_points(1, 1000)
        store.mark_warned([1])
        clock.advance(hours=49)

        store.post_link(1, "a", "http://x", "T")

        user = store.get_user(1)
        assert user.warned is False
        assert user.last_active_at.replace(tzinfo=None) == clock.now.replace(tzinfo=None)

    def test_concurrent_posts_cannot_overspend(self, store, db_engine):
        """Two racing posts against a 1000 balance: exactly one succeeds."""
        store.get_or_create_user(1, "a")
        store.adjust_points(1, 1000)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(
                lambda i: store.post_link(1, "a", f"http://x/{i}", "T"), range(4),
            ))

        assert sum(r.ok for r in results) == 1
        assert _points(db_engine, 1) == 0
        assert store.count_links() == 1

    def test_two_threads_released_together(self, store, db_engine):
        store.get_or_create_user(1, "a")
        store.adjust_points(1, 1000)
        barrier = threading.Barrier(2)
        results = []

        def post(i):
            barrier.wait()
            results.append(store.post_link(1, "a", f"http://x/{i}", f"T{i}"))

        workers = [threading.Thread(target=post, args=(i,)) for i in range(2)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        assert sorted(r.ok for r in results) == [False, True]
        refused = next(r for r in results if not r.ok)
        assert refused.balance == 0
        assert _points(db_engine, 1) == 0
        assert store.count_links() == 1


class TestCreditInteraction:
    def test_known_action_credits(self, store):
        result = store.credit_interaction(2, "bob", ActionKind.COMMENT)
        assert result.earned == 350
        assert result.balance == 350
        assert result.display_name == "bob"

    def test_unknown_action_credits_zero(self, store):
        store.get_or_create_user(2, "bob")
        store.adjust_points(2, 40)
        result = store.credit_interaction(2, "bob", None)
        assert result.earned == 0
        assert result.balance == 40

    def test_credit_clears_warning(self, store):
        store.get_or_create_user(2, "bob")
        store.mark_warned([2])
        store.credit_interaction(2, "bob", ActionKind.LIKE)
        assert store.get_user(2).warned is False


class TestAggregates:
    def test_empty_store(self, store):
        assert store.count_users() == 0
        assert store.count_links() == 0
        assert store.sum_all_points() == 0

    def test_sum_includes_negative_balances(self, store):
        store.get_or_create_user(1, "a")
        store.get_or_create_user(2, "b")
        store.adjust_points(1, 700)
        store.adjust_points(2, -100)
        assert store.sum_all_points() == 600


class TestInactiveSelection:
    def test_threshold_and_warned_filter(self, store, clock):
        store.get_or_create_user(1, "old")
        clock.advance(hours=30)
        store.get_or_create_user(2, "newer")
        clock.advance(hours=20)  # user 1: 50h idle, user 2: 20h idle

        idle = store.users_inactive_since(48 * 3600)
        assert [u.id for u in idle] == [1]

        store.mark_warned([1])
        assert store.users_inactive_since(48 * 3600, only_unwarned=True) == []
        assert [u.id for u in store.users_inactive_since(48 * 3600)] == [1]

    def test_mark_warned_empty(self, store):
        assert store.mark_warned([]) == 0

    def test_links_table_untouched_by_selection(self, store, db_engine):
        store.get_or_create_user(1, "a")
        store.users_inactive_since(0)
        with Session(db_engine) as session:
            assert session.scalars(select(Link)).all() == []


class TestInactivityTransitions:
    def test_warn_marks_idle_unwarned_users(self, store, clock):
        store.get_or_create_user(1, "idle")
        clock.advance(hours=10)
        store.get_or_create_user(2, "recent")
        clock.advance(hours=38)

        assert store.warn_inactive(48 * 3600) == [1]
        assert store.get_user(1).warned is True
        assert store.get_user(2).warned is False
        # Already warned
        assert store.warn_inactive(48 * 3600) == []

    def test_penalize_charges_each_idle_user(self, store, clock):
        store.get_or_create_user(1, "a")
        store.get_or_create_user(2, "b")
        store.adjust_points(2, 50)
        clock.advance(hours=72)

        assert store.penalize_inactive(72 * 3600, 100) == [1, 2]
        assert store.get_user(1).points == -100
        assert store.get_user(2).points == -50

    def test_touch_waits_for_penalty_to_finish(self, store, clock, db_engine):
        store.get_or_create_user(1, "a")
        clock.advance(hours=80)
        state = touch_on_first_select(db_engine, store, 1)

        charged = store.penalize_inactive(72 * 3600, 100)
        state["worker"].join()

        assert state["blocked"] is True
        assert charged == [1]
        user = store.get_user(1)
        assert user.points == -100
        assert user.last_active_at.replace(tzinfo=None) == clock.now.replace(tzinfo=None)
        # The touch landed after the charge, so the next sweep skips them
        assert store.penalize_inactive(72 * 3600, 100) == []

    def test_touch_waits_for_warning_to_finish(self, store, clock, db_engine):
        store.get_or_create_user(1, "a")
        clock.advance(hours=50)
        state = touch_on_first_select(db_engine, store, 1)

        assert store.warn_inactive(48 * 3600) == [1]
        state["worker"].join()

        assert state["blocked"] is True
        assert store.get_user(1).warned is False
