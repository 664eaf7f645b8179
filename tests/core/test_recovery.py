"""Tests for staker/core/recovery.py: sweeping tokens and retirement."""

import pytest

from staker.core import (
    RECOVERY_COOLDOWN,
    Event,
    ProgramRetired,
    ProtectedAsset,
    RecoveryWindowNotElapsed,
    Unauthorized,
)

from tests.helpers import (
    ALICE,
    BONUS,
    DAY,
    DIST,
    MGMT,
    RWD,
    STRAY,
    WEEK,
    add_reward,
    deposit,
    escrow,
    fund,
    notify,
    wallet,
)


@pytest.fixture
def finished(world):
    """Two funded tokens whose periods have both ended, nothing claimed yet."""
    add_reward(world, RWD, WEEK)
    add_reward(world, BONUS, 2 * WEEK)
    deposit(world, ALICE, 100)
    notify(world, RWD, WEEK)
    notify(world, BONUS, 2 * WEEK)
    world.clock.advance(2 * WEEK)
    return world


class TestForeignToken:
    def test_sweeps_requested_amount(self, world):
        w = world
        w.bank.token(STRAY).mint(w.staker.address, 100)
        assert w.staker.recover(MGMT, STRAY, 40) == 40
        assert wallet(w, STRAY, MGMT) == 40
        assert escrow(w, STRAY) == 60
        assert not w.staker.retired
        assert w.staker.events[-1].event == Event.RECOVERED
        assert w.staker.events[-1].amount == 40

    def test_no_time_restriction(self, linear_world):
        w = linear_world
        deposit(w, ALICE, 100)
        notify(w, RWD, WEEK)
        w.bank.token(STRAY).mint(w.staker.address, 5)
        assert w.staker.recover(MGMT, STRAY, 5) == 5

    def test_protected_asset(self, world):
        w = world
        deposit(w, ALICE, 100)
        with pytest.raises(ProtectedAsset):
            w.staker.recover(MGMT, w.asset.address, 1)

    def test_management_only(self, world):
        w = world
        w.bank.token(STRAY).mint(w.staker.address, 100)
        with pytest.raises(Unauthorized):
            w.staker.recover(ALICE, STRAY, 100)


class TestRewardTokenRecovery:
    def test_window_uses_latest_period_finish(self, finished):
        w = finished
        latest = w.staker.reward_data(BONUS).period_finish
        assert latest > w.staker.reward_data(RWD).period_finish
        assert w.staker.recovery.recovery_opens_at() == latest + RECOVERY_COOLDOWN

        w.clock.set(latest + RECOVERY_COOLDOWN)
        with pytest.raises(RecoveryWindowNotElapsed):
            w.staker.recover(MGMT, RWD, 1)
        assert not w.staker.retired

    def test_sweeps_full_balance_and_retires(self, finished):
        w = finished
        w.clock.set(w.staker.recovery.recovery_opens_at() + 1)
        remaining = escrow(w, RWD)
        assert remaining == WEEK

        assert w.staker.recover(MGMT, RWD, 1) == remaining
        assert escrow(w, RWD) == 0
        assert wallet(w, RWD, MGMT) == remaining
        assert w.staker.retired
        assert [e.event for e in w.staker.events[-2:]] == [Event.RECOVERED, Event.RETIRED]

    def test_retirement_blocks_funding_only(self, finished):
        w = finished
        w.clock.set(w.staker.recovery.recovery_opens_at() + 1)
        w.staker.recover(MGMT, RWD, 0)

        fund(w, RWD, WEEK)
        with pytest.raises(ProgramRetired):
            w.staker.notify_reward_amount(DIST, RWD, WEEK)
        fund(w, BONUS, WEEK)
        with pytest.raises(ProgramRetired):
            w.staker.notify_reward_amount(DIST, BONUS, WEEK)

        # Owed BONUS is still claimable, and shares can still leave.
        assert w.staker.claim_one(ALICE, BONUS) == 2 * WEEK
        w.vault.withdraw(ALICE, 100, ALICE, ALICE)
        assert w.vault.balance_of(ALICE) == 0

    def test_retirement_is_permanent(self, finished):
        w = finished
        w.clock.set(w.staker.recovery.recovery_opens_at() + 1)
        w.staker.recover(MGMT, RWD, 0)
        w.staker.recover(MGMT, BONUS, 0)
        assert w.staker.retired
        assert [e.event for e in w.staker.events].count(Event.RETIRED) == 1

    def test_rejected_recovery_does_not_retire(self, finished):
        w = finished
        with pytest.raises(RecoveryWindowNotElapsed):
            w.staker.recover(MGMT, RWD, 0)
        w.clock.advance(DAY)
        notify(w, RWD, WEEK)
        assert w.staker.reward_data(RWD).reward_rate == 1
