"""
Funding notifications.

`DistributionScheduler.notify()` turns a funded amount into either a new
linear emission period or an immediate per-share credit. The mode is chosen
once, here, from the token's `EmissionMode` variant.

Instant releases reset `reward_rate` to 0 and end any running linear period,
so switching a token from linear to instant discards its residual stream.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict

from .accrual import AccrualEngine, Clock
from .errors import InsufficientEscrow, InvalidAmount, InvalidDuration, PeriodNotComplete, ProgramRetired, Unauthorized
from .math import derived_instant_rate, instant_per_share, linear_rate
from .params import StakerConfig
from .registry import RewardTokenRegistry
from .types import (
    Address,
    Event,
    InstantMode,
    LinearMode,
    RewardConfig,
    RewardEvent,
    TokenDirectory,
    VaultView,
)

logger = logging.getLogger(__name__)

Emit = Callable[[RewardEvent], None]


class DistributionScheduler:
    def __init__(
        self,
        registry: RewardTokenRegistry,
        accrual: AccrualEngine,
        vault: VaultView,
        bank: TokenDirectory,
        address: Address,
        clock: Clock,
        emit: Emit,
        is_retired: Callable[[], bool],
        config: StakerConfig = StakerConfig(),
    ) -> None:
        self.registry = registry
        self.accrual = accrual
        self.vault = vault
        self.bank = bank
        self.address = address
        self.clock = clock
        self.emit = emit
        self.is_retired = is_retired
        self.config = config

    def notify(self, caller: Address, token: Address, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or not (0 < amount < self.config.max_notify):
            raise InvalidAmount(f"notify amount out of range: {amount!r}")
        config = self.registry.get(token)
        if self.is_retired():
            raise ProgramRetired("reward program is retired")
        if caller != config.distributor and caller != self.vault.management():
            raise Unauthorized(f"{caller} may not fund {token}")

        self.accrual.checkpoint()

        reward_token = self.bank.token(token)
        reward_token.transfer_from(self.address, caller, self.address, amount)

        total_supply = self.vault.total_supply()
        if total_supply == 0:
            management = self.vault.management()
            reward_token.transfer(self.address, management, amount)
            self.emit(RewardEvent(Event.NOTIFIED_WITH_ZERO_SUPPLY, token=token, account=caller, amount=amount, counterparty=management))
            logger.info(
                "Funding redirected: zero supply",
                extra={"event": "scheduler.zero_supply", "token": token, "amount": amount},
            )
            return

        config = self.registry.get(token)
        handler = _NOTIFY_DISPATCH[type(config.mode)]
        new_config = handler(self, token, config, amount, total_supply)
        self.registry.put(token, new_config)
        self.emit(RewardEvent(Event.REWARD_ADDED, token=token, account=caller, amount=amount))
        logger.info(
            "Reward added",
            extra={
                "event": "scheduler.reward_added",
                "token": token,
                "amount": amount,
                "reward_rate": new_config.reward_rate,
                "period_finish": new_config.period_finish,
            },
        )

    def _notify_linear(self, token: Address, config: RewardConfig, amount: int, total_supply: int) -> RewardConfig:
        now = self.clock()
        duration = config.duration
        rate = linear_rate(amount, duration, now, config.period_finish, config.reward_rate)

        escrow = self.bank.token(token).balance_of(self.address)
        if rate * duration > escrow:
            raise InsufficientEscrow(f"rate {rate} over {duration}s exceeds escrow {escrow}")

        return replace(
            config,
            last_reward_rate=config.reward_rate,
            last_notify_time=now,
            last_update_time=now,
            period_finish=now + duration,
            reward_rate=rate,
        )

    def _notify_instant(self, token: Address, config: RewardConfig, amount: int, total_supply: int) -> RewardConfig:
        now = self.clock()
        updates: Dict[str, int] = {}
        derived = derived_instant_rate(amount, now, config.last_notify_time)
        if derived is not None:
            updates["last_reward_rate"] = derived
            updates["last_notify_time"] = now

        return replace(
            config,
            reward_rate=0,
            last_update_time=now,
            period_finish=now,
            reward_per_share_stored=config.reward_per_share_stored
            + instant_per_share(amount, total_supply, scale=self.config.scale),
            **updates,
        )

    def set_rewards_duration(self, token: Address, duration: int) -> None:
        config = self.registry.get(token)
        if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
            raise InvalidDuration(f"duration must be a positive int, got {duration!r}")
        if self.clock() <= config.period_finish:
            raise PeriodNotComplete(f"period for {token} ends at {config.period_finish}")

        # Settle linear accrual under the old duration before the mode can change.
        self.accrual.checkpoint()
        config = self.registry.get(token)
        self.registry.put(token, replace(config, duration=duration))
        self.emit(RewardEvent(Event.REWARDS_DURATION_UPDATED, token=token, amount=duration))
        logger.info(
            "Rewards duration updated",
            extra={"event": "scheduler.duration_updated", "token": token, "duration": duration},
        )

    def reward_for_duration(self, token: Address) -> int:
        config = self.registry.get(token)
        return config.reward_rate * config.duration


_NOTIFY_DISPATCH: Dict[type, Callable[..., RewardConfig]] = {
    LinearMode: DistributionScheduler._notify_linear,
    InstantMode: DistributionScheduler._notify_instant,
}
