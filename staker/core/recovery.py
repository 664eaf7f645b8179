"""
Recovery of stray tokens and retirement of the reward program.

Foreign tokens can be swept at any time. A configured reward token can only
be swept once every reward period has been over for the cooldown; that sweep
takes the whole balance and permanently retires the program (no further
funding; claims keep working against whatever the engine still holds).
"""

from __future__ import annotations

import logging
from typing import Callable

from .accrual import Clock
from .errors import ProtectedAsset, RecoveryWindowNotElapsed
from .params import StakerConfig
from .registry import RewardTokenRegistry
from .types import Address, Event, RewardEvent, TokenDirectory, VaultView

logger = logging.getLogger(__name__)


class RecoveryModule:
    def __init__(
        self,
        registry: RewardTokenRegistry,
        vault: VaultView,
        bank: TokenDirectory,
        address: Address,
        clock: Clock,
        emit: Callable[[RewardEvent], None],
        config: StakerConfig = StakerConfig(),
    ) -> None:
        self.registry = registry
        self.vault = vault
        self.bank = bank
        self.address = address
        self.clock = clock
        self.emit = emit
        self.config = config
        self.retired = False

    def recovery_opens_at(self) -> int:
        """First timestamp strictly after which reward tokens may be swept."""
        return self.registry.max_period_finish() + self.config.recovery_cooldown

    def recover(self, token: Address, amount: int) -> int:
        """Send `amount` of `token` to management; returns the amount actually sent."""
        if token == self.vault.asset:
            raise ProtectedAsset("cannot recover the vault's underlying asset")

        contract = self.bank.token(token)
        is_reward_token = token in self.registry
        if is_reward_token:
            opens_at = self.recovery_opens_at()
            if self.clock() <= opens_at:
                raise RecoveryWindowNotElapsed(f"reward tokens recoverable after {opens_at}")
            amount = contract.balance_of(self.address)

        management = self.vault.management()
        contract.transfer(self.address, management, amount)
        self.emit(RewardEvent(Event.RECOVERED, token=token, amount=amount, counterparty=management))
        logger.info(
            "Token recovered",
            extra={"event": "recovery.recovered", "token": token, "amount": amount, "reward_token": is_reward_token},
        )

        if is_reward_token and not self.retired:
            self.retired = True
            self.emit(RewardEvent(Event.RETIRED, token=token))
            logger.info("Reward program retired", extra={"event": "recovery.retired", "token": token})
        return amount
