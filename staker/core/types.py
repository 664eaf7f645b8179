"""Data types for the reward accrual engine.

Units/conventions:
- token amounts and shares are non-negative integers (no decimals),
- timestamps are integer seconds,
- `reward_per_share_*` values are scaled by `SCALE` (1e18),
- addresses are hex strings; `ZERO_ADDRESS` is the null sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Protocol, Union


Address = str

ZERO_ADDRESS: Address = "0x" + "00" * 20

SCALE = 10**18
INSTANT_DURATION = 1
MAX_NOTIFY = 10**30
RECOVERY_COOLDOWN = 90 * 24 * 60 * 60


@dataclass(frozen=True)
class LinearMode:
    """Emit the funded amount at a constant rate over `duration` seconds."""

    duration: int


@dataclass(frozen=True)
class InstantMode:
    """Credit the funded amount to the per-share accumulator immediately."""


EmissionMode = Union[LinearMode, InstantMode]


def emission_mode(duration: int) -> EmissionMode:
    """Select the emission mode encoded by a duration (`1` is the instant sentinel)."""
    if duration == INSTANT_DURATION:
        return InstantMode()
    return LinearMode(duration=duration)


@dataclass(frozen=True)
class RewardConfig:
    """Per-token distribution configuration and accrual checkpoint."""

    distributor: Address
    duration: int
    period_finish: int = 0
    reward_rate: int = 0
    last_update_time: int = 0
    reward_per_share_stored: int = 0
    last_notify_time: int = 0
    last_reward_rate: int = 0

    def __post_init__(self) -> None:
        for name in (
            "duration",
            "period_finish",
            "reward_rate",
            "last_update_time",
            "reward_per_share_stored",
            "last_notify_time",
            "last_reward_rate",
        ):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.duration == 0:
            raise ValueError("duration must be positive")
        if self.last_update_time > self.period_finish:
            raise ValueError("last_update_time must be <= period_finish")

    @property
    def mode(self) -> EmissionMode:
        return emission_mode(self.duration)

    @property
    def is_instant(self) -> bool:
        return isinstance(self.mode, InstantMode)


@dataclass(frozen=True)
class UserRecord:
    """Settled balance and accumulator checkpoint for one (account, token) pair."""

    owed: int = 0
    paid_per_share: int = 0

    def __post_init__(self) -> None:
        if self.owed < 0:
            raise ValueError("owed must be non-negative")
        if self.paid_per_share < 0:
            raise ValueError("paid_per_share must be non-negative")


@unique
class Event(Enum):
    REWARD_ADDED = "RewardAdded"
    REWARD_PAID = "RewardPaid"
    REWARDS_DURATION_UPDATED = "RewardsDurationUpdated"
    NOTIFIED_WITH_ZERO_SUPPLY = "NotifiedWithZeroSupply"
    RECOVERED = "Recovered"
    REWARD_TOKEN_ADDED = "RewardTokenAdded"
    CLAIM_RECIPIENT_SET = "ClaimRecipientSet"
    RETIRED = "Retired"


@dataclass(frozen=True)
class RewardEvent:
    """Observable notification emitted by a committed operation."""

    event: Event
    token: Address = ZERO_ADDRESS
    account: Address = ZERO_ADDRESS
    amount: int = 0
    counterparty: Address = ZERO_ADDRESS


@dataclass(frozen=True)
class StepResult:
    """Result of a single dispatched command."""

    accepted: bool
    events: tuple[RewardEvent, ...] = ()
    value: object = None
    rejection: str | None = None


class VaultView(Protocol):
    """Read-only vault queries consumed by every checkpoint."""

    def total_supply(self) -> int: ...

    def balance_of(self, account: Address) -> int: ...

    def is_shutdown(self) -> bool: ...

    def management(self) -> Address: ...

    @property
    def asset(self) -> Address: ...


class FungibleToken(Protocol):
    """Minimal token interface; failures raise and abort the caller's operation."""

    address: Address

    def balance_of(self, account: Address) -> int: ...

    def transfer(self, sender: Address, recipient: Address, amount: int) -> bool: ...

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: int) -> bool: ...


class AccrualObserver(Protocol):
    """Pre-mutation hooks a vault invokes before changing share balances."""

    def on_pre_deposit(self, receiver: Address) -> None: ...

    def on_pre_withdraw(self, owner: Address) -> None: ...

    def on_pre_transfer(self, sender: Address, receiver: Address) -> None: ...


class TokenDirectory(Protocol):
    """Resolves a token address to its contract."""

    def token(self, address: Address) -> FungibleToken: ...
