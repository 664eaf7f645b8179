"""Tests for staker/core/invariants.py."""

from dataclasses import replace

from staker.core import check_all

from tests.helpers import ALICE, BOB, DAY, RWD, WEEK, deposit, notify


class TestCheckAll:
    def test_clean_lifecycle(self, linear_world):
        w = linear_world
        assert check_all(w.staker) == []
        deposit(w, ALICE, 30)
        deposit(w, BOB, 70)
        notify(w, RWD, 10 * WEEK)
        assert check_all(w.staker) == []

        w.clock.advance(3 * DAY)
        notify(w, RWD, 3 * WEEK)
        w.staker.claim(ALICE)
        w.clock.advance(WEEK)
        w.staker.claim(BOB)
        assert check_all(w.staker) == []

    def test_detects_lost_escrow(self, linear_world):
        w = linear_world
        deposit(w, ALICE, 100)
        notify(w, RWD, 10 * WEEK)
        w.bank.table.subtract(w.staker.address, RWD, WEEK)
        assert check_all(w.staker) == [f"inv_escrow_covers_commitments:{RWD}"]

    def test_detects_future_checkpoint(self, linear_world):
        w = linear_world
        now = w.clock.now
        w.staker.registry.put(RWD, replace(w.staker.reward_data(RWD), last_update_time=now + 10, period_finish=now + 20))
        assert check_all(w.staker) == [f"inv_update_not_from_future:{RWD}"]
