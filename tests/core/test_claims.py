"""Tests for staker/core/claims.py: settlement, rollback and reentrancy."""

import pytest

from staker.core import Event, ReentrantCall, TokenError, UnknownToken

from tests.helpers import ALICE, BOB, BONUS, DAY, RWD, STRAY, WEEK, add_reward, deposit, escrow, notify, wallet


def _two_token_world(world):
    add_reward(world, RWD, WEEK)
    add_reward(world, BONUS, 1)
    deposit(world, ALICE, 100)
    notify(world, RWD, WEEK)
    notify(world, BONUS, 1_000)
    world.clock.advance(DAY)
    return world


class TestClaim:
    def test_pays_and_zeroes(self, world):
        w = _two_token_world(world)
        paid = w.staker.claim(ALICE)

        assert paid == {RWD: DAY, BONUS: 1_000}
        assert wallet(w, RWD, ALICE) == DAY
        assert wallet(w, BONUS, ALICE) == 1_000
        assert w.staker.rewards(ALICE, RWD) == 0
        assert w.staker.earned(ALICE, RWD) == 0
        assert w.staker.earned(ALICE, BONUS) == 0
        assert [e.event for e in w.staker.events[-2:]] == [Event.REWARD_PAID, Event.REWARD_PAID]
        assert w.staker.events[-1].account == w.staker.events[-1].counterparty == ALICE

    def test_second_claim_pays_nothing(self, world):
        w = _two_token_world(world)
        w.staker.claim(ALICE)
        n_events = len(w.staker.events)

        assert w.staker.claim(ALICE) == {}
        assert len(w.staker.events) == n_events
        assert wallet(w, RWD, ALICE) == DAY

    def test_nothing_owed_is_noop(self, world):
        w = world
        add_reward(w, RWD, WEEK)
        assert w.staker.claim(BOB) == {}

    def test_no_tokens_is_noop(self, world):
        assert world.staker.claim(ALICE) == {}

    def test_accrues_again_after_claim(self, world):
        w = _two_token_world(world)
        w.staker.claim(ALICE)
        w.clock.advance(DAY)
        assert w.staker.earned(ALICE, RWD) == DAY

    def test_failed_transfer_rolls_back_every_token(self, world):
        w = _two_token_world(world)
        # BONUS escrow disappears; RWD is paid first, then BONUS fails.
        w.bank.table.subtract(w.staker.address, BONUS, escrow(w, BONUS))
        events_before = list(w.staker.events)

        with pytest.raises(TokenError):
            w.staker.claim(ALICE)

        assert wallet(w, RWD, ALICE) == 0
        assert escrow(w, RWD) == WEEK
        assert w.staker.earned(ALICE, RWD) == DAY
        assert w.staker.events == events_before


class TestClaimOne:
    def test_single_token(self, world):
        w = _two_token_world(world)
        assert w.staker.claim_one(ALICE, BONUS) == 1_000
        assert wallet(w, BONUS, ALICE) == 1_000
        assert wallet(w, RWD, ALICE) == 0
        assert w.staker.rewards(ALICE, RWD) == DAY

    def test_unknown_token(self, world):
        w = _two_token_world(world)
        with pytest.raises(UnknownToken):
            w.staker.claim_one(ALICE, STRAY)


class TestReentrancy:
    def test_reentrant_claim_is_refused_and_pays_once(self, world):
        w = _two_token_world(world)
        seen = []

        def reenter(token, sender, recipient, amount):
            if recipient != ALICE:
                return
            try:
                w.staker.claim(ALICE)
            except ReentrantCall as exc:
                seen.append(exc)
            # By the time tokens move, the ledger already reads zero.
            seen.append(w.staker.rewards(ALICE, token))

        w.bank.token(RWD).on_transfer = reenter
        w.staker.claim(ALICE)

        assert isinstance(seen[0], ReentrantCall)
        assert seen[1] == 0
        assert wallet(w, RWD, ALICE) == DAY
        assert escrow(w, RWD) == WEEK - DAY

    def test_guard_released_after_failure(self, world):
        w = _two_token_world(world)
        w.bank.table.subtract(w.staker.address, BONUS, escrow(w, BONUS))
        with pytest.raises(TokenError):
            w.staker.claim(ALICE)
        assert w.staker.claim_one(ALICE, RWD) == DAY
