"""
`RewardStaker`: the composed reward accrual state for one vault.

Owns the token registry, user ledger and delegation map, wires the accrual,
scheduling, claim and recovery components over them, and provides:

- the management access gate,
- a non-reentrant guard on claim paths,
- an all-or-nothing boundary around every mutating call: registries, the
  retired flag and token custody are snapshotted on entry and restored if
  anything raises; events are only published when the outermost call commits.

It also implements the vault's `AccrualObserver` hooks, each of which is a
plain checkpoint of the affected accounts.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

from .accrual import AccrualEngine, Clock
from .claims import ClaimProcessor
from .delegation import DelegationRegistry
from .errors import ReentrantCall, Unauthorized, ZeroAddress
from .ledger import UserLedger
from .params import StakerConfig
from .recovery import RecoveryModule
from .registry import RewardTokenRegistry
from .scheduler import DistributionScheduler
from .types import (
    ZERO_ADDRESS,
    Address,
    Event,
    RewardConfig,
    RewardEvent,
    TokenDirectory,
    VaultView,
)

logger = logging.getLogger(__name__)


class RewardStaker:
    def __init__(
        self,
        vault: VaultView,
        bank: TokenDirectory,
        clock: Clock,
        *,
        address: Address,
        config: StakerConfig = StakerConfig(),
    ) -> None:
        if address == ZERO_ADDRESS:
            raise ZeroAddress("staker address must be non-zero")
        self.vault = vault
        self.bank = bank
        self.clock = clock
        self.address = address
        self.config = config

        self.registry = RewardTokenRegistry()
        self.ledger = UserLedger()
        self.events: List[RewardEvent] = []
        self._pending: List[List[RewardEvent]] = []
        self._entered = False

        self.accrual = AccrualEngine(self.registry, self.ledger, vault, clock, config)
        self.delegation = DelegationRegistry(self._emit)
        self.recovery = RecoveryModule(self.registry, vault, bank, address, clock, self._emit, config)
        self.scheduler = DistributionScheduler(
            self.registry,
            self.accrual,
            vault,
            bank,
            address,
            clock,
            self._emit,
            lambda: self.recovery.retired,
            config,
        )
        self.claims = ClaimProcessor(self.registry, self.ledger, self.accrual, bank, address, self._emit)

    # ==================== Transaction boundary ====================

    def _emit(self, event: RewardEvent) -> None:
        if not self._pending:
            raise RuntimeError("events can only be emitted inside an operation")
        self._pending[-1].append(event)

    def _snapshot(self) -> Tuple[Any, ...]:
        bank_snap = self.bank.snapshot() if hasattr(self.bank, "snapshot") else None
        return (
            self.registry.snapshot(),
            self.ledger.snapshot(),
            self.delegation.snapshot(),
            self.recovery.retired,
            bank_snap,
        )

    def _restore(self, snap: Tuple[Any, ...]) -> None:
        registry_snap, ledger_snap, delegation_snap, retired, bank_snap = snap
        self.registry.restore(registry_snap)
        self.ledger.restore(ledger_snap)
        self.delegation.restore(delegation_snap)
        self.recovery.retired = retired
        if bank_snap is not None:
            self.bank.restore(bank_snap)

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        snap = self._snapshot()
        self._pending.append([])
        try:
            yield
        except Exception as exc:
            self._pending.pop()
            self._restore(snap)
            logger.warning(
                "Operation rejected",
                extra={
                    "event": "staker.rejected",
                    "operation": operation,
                    "reason": getattr(exc, "code", type(exc).__name__),
                    "detail": str(exc),
                },
            )
            raise
        events = self._pending.pop()
        if self._pending:
            self._pending[-1].extend(events)
        else:
            self.events.extend(events)

    @contextmanager
    def _nonreentrant(self) -> Iterator[None]:
        if self._entered:
            raise ReentrantCall("reentrant call")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    def _require_management(self, caller: Address) -> None:
        if caller != self.vault.management():
            raise Unauthorized(f"{caller} is not management")

    # ==================== Views ====================

    @property
    def retired(self) -> bool:
        return self.recovery.retired

    def reward_tokens(self) -> Tuple[Address, ...]:
        return self.registry.tokens()

    def reward_tokens_length(self) -> int:
        return len(self.registry)

    def reward_data(self, token: Address) -> RewardConfig:
        return self.registry.get(token)

    def rewards(self, account: Address, token: Address) -> int:
        """Settled (checkpointed) balance owed to `account`."""
        return self.ledger.owed(account, token)

    def user_reward_per_share_paid(self, account: Address, token: Address) -> int:
        return self.ledger.paid_per_share(account, token)

    def last_time_reward_applicable(self, token: Address) -> int:
        return self.accrual.last_time_reward_applicable(token)

    def reward_per_share(self, token: Address) -> int:
        return self.accrual.reward_per_share(token)

    def earned(self, account: Address, token: Address) -> int:
        return self.accrual.earned(account, token)

    def earned_all(self, account: Address) -> Dict[Address, int]:
        return {token: self.accrual.earned(account, token) for token in self.registry}

    def reward_for_duration(self, token: Address) -> int:
        return self.scheduler.reward_for_duration(token)

    def claim_for_recipient(self, staker: Address) -> Address:
        return self.delegation.recipient_of(staker)

    # ==================== Vault hooks ====================

    def checkpoint(self, account: Address = ZERO_ADDRESS) -> None:
        with self._atomic("checkpoint"):
            self.accrual.checkpoint(account)

    def on_pre_deposit(self, receiver: Address) -> None:
        self.checkpoint(receiver)

    def on_pre_withdraw(self, owner: Address) -> None:
        self.checkpoint(owner)

    def on_pre_transfer(self, sender: Address, receiver: Address) -> None:
        with self._atomic("transfer"):
            self.accrual.checkpoint(sender)
            self.accrual.checkpoint(receiver)

    # ==================== Management ====================

    def add_reward(self, caller: Address, token: Address, distributor: Address, duration: int) -> None:
        with self._atomic("add_reward"):
            self._require_management(caller)
            self.registry.add(token, distributor, duration)
            self._emit(RewardEvent(Event.REWARD_TOKEN_ADDED, token=token, amount=duration, counterparty=distributor))
            logger.info(
                "Reward token added",
                extra={"event": "staker.reward_token_added", "token": token, "distributor": distributor, "duration": duration},
            )

    def set_rewards_duration(self, caller: Address, token: Address, duration: int) -> None:
        with self._atomic("set_rewards_duration"):
            self._require_management(caller)
            self.scheduler.set_rewards_duration(token, duration)

    def set_claim_for(self, caller: Address, staker: Address, recipient: Address) -> None:
        with self._atomic("set_claim_for"):
            self._require_management(caller)
            self.delegation.set(staker, recipient)

    def recover(self, caller: Address, token: Address, amount: int) -> int:
        with self._atomic("recover"):
            self._require_management(caller)
            return self.recovery.recover(token, amount)

    # ==================== Funding ====================

    def notify_reward_amount(self, caller: Address, token: Address, amount: int) -> None:
        with self._atomic("notify_reward_amount"):
            self.scheduler.notify(caller, token, amount)

    # ==================== Claims ====================

    def set_claim_for_me(self, caller: Address, recipient: Address) -> None:
        with self._atomic("set_claim_for_me"):
            self.delegation.set(caller, recipient)

    def claim(self, caller: Address) -> Dict[Address, int]:
        with self._atomic("claim"), self._nonreentrant():
            return self.claims.claim(caller, caller)

    def claim_one(self, caller: Address, token: Address) -> int:
        with self._atomic("claim_one"), self._nonreentrant():
            return self.claims.claim_one(caller, caller, token)

    def claim_for(self, caller: Address, staker: Address) -> Dict[Address, int]:
        with self._atomic("claim_for"), self._nonreentrant():
            self.delegation.require_recipient(staker, caller)
            return self.claims.claim(staker, caller)

    def __repr__(self) -> str:
        return f"RewardStaker({self.address}, {len(self.registry)} tokens, retired={self.retired})"
