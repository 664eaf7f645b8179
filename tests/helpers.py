"""Shared addresses and world-building helpers for the test suite."""

from __future__ import annotations

from staker.core.params import StakerConfig
from staker.integration.scenario import StakingWorld, build_world

MGMT = "0x" + "11" * 20
DIST = "0x" + "d1" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c0" * 20
DAVE = "0x" + "da" * 20
MALLORY = "0x" + "ee" * 20

RWD = "0x" + "e1" * 20
BONUS = "0x" + "e2" * 20
STRAY = "0x" + "5f" * 20

DAY = 86_400
WEEK = 7 * DAY
T0 = 1_700_000_000


def make_world(*, config: StakerConfig = StakerConfig(), start_time: int = T0) -> StakingWorld:
    world = build_world(management=MGMT, start_time=start_time, config=config)
    world.bank.create_token(RWD, symbol="RWD")
    world.bank.create_token(BONUS, symbol="BONUS")
    world.bank.create_token(STRAY, symbol="STRAY")
    return world


def add_reward(world: StakingWorld, token: str = RWD, duration: int = WEEK, distributor: str = DIST) -> None:
    world.staker.add_reward(MGMT, token, distributor, duration)


def deposit(world: StakingWorld, account: str, assets: int) -> None:
    world.asset.mint(account, assets)
    world.asset.approve(account, world.vault.address, assets)
    world.vault.deposit(account, assets, account)


def fund(world: StakingWorld, token: str, amount: int, funder: str = DIST) -> None:
    """Give `funder` `amount` of `token` and approve the staker to pull it."""
    t = world.bank.token(token)
    t.mint(funder, amount)
    t.approve(funder, world.staker.address, t.allowance(funder, world.staker.address) + amount)


def notify(world: StakingWorld, token: str, amount: int, funder: str = DIST) -> None:
    fund(world, token, amount, funder)
    world.staker.notify_reward_amount(funder, token, amount)


def escrow(world: StakingWorld, token: str) -> int:
    return world.bank.token(token).balance_of(world.staker.address)


def wallet(world: StakingWorld, token: str, account: str) -> int:
    return world.bank.token(token).balance_of(account)
