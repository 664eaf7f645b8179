"""
Time-weighted reward-per-share accrual.

`AccrualEngine` derives every reading from (time, total supply, shutdown
state) and the stored checkpoint in each `RewardConfig`. `checkpoint()`
freezes the accumulator for all reward tokens and, for a real account,
settles its pending accrual into the ledger.

Shutdown override: once the vault reports shutdown, linear tokens read a
reward-per-share of 0 and every account's `earned()` is 0.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict

from .ledger import UserLedger
from .math import accrued_per_share, earned_amount, last_time_reward_applicable
from .params import StakerConfig
from .registry import RewardTokenRegistry
from .types import ZERO_ADDRESS, Address, RewardConfig, UserRecord, VaultView

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class AccrualEngine:
    def __init__(
        self,
        registry: RewardTokenRegistry,
        ledger: UserLedger,
        vault: VaultView,
        clock: Clock,
        config: StakerConfig = StakerConfig(),
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.vault = vault
        self.clock = clock
        self.config = config

    def last_time_reward_applicable(self, token: Address) -> int:
        return last_time_reward_applicable(self.clock(), self.registry.get(token).period_finish)

    def reward_per_share(self, token: Address) -> int:
        return self._reward_per_share(self.registry.get(token), self.vault.total_supply())

    def _reward_per_share(self, config: RewardConfig, total_supply: int) -> int:
        if total_supply == 0 or config.is_instant:
            return config.reward_per_share_stored
        if self.vault.is_shutdown():
            return 0
        applicable = last_time_reward_applicable(self.clock(), config.period_finish)
        elapsed = applicable - config.last_update_time
        return config.reward_per_share_stored + accrued_per_share(
            elapsed, config.reward_rate, total_supply, scale=self.config.scale
        )

    def earned(self, account: Address, token: Address) -> int:
        if self.vault.is_shutdown():
            return 0
        return self._earned(account, token, self.reward_per_share(token))

    def _earned(self, account: Address, token: Address, reward_per_share: int) -> int:
        record = self.ledger.get(account, token)
        return earned_amount(
            self.vault.balance_of(account),
            reward_per_share,
            record.paid_per_share,
            record.owed,
            scale=self.config.scale,
        )

    def checkpoint(self, account: Address = ZERO_ADDRESS) -> None:
        """
        Refresh every token's accumulator and, unless `account` is the null
        sentinel, settle the account's accrual.

        All new values are computed before any is written, so a failure part
        way through leaves nothing half-updated.
        """
        now = self.clock()
        total_supply = self.vault.total_supply()
        shutdown = self.vault.is_shutdown()

        new_configs: Dict[Address, RewardConfig] = {}
        new_records: Dict[Address, UserRecord] = {}
        for token, config in self.registry.items():
            stored = self._reward_per_share(config, total_supply)
            new_configs[token] = replace(
                config,
                reward_per_share_stored=stored,
                last_update_time=last_time_reward_applicable(now, config.period_finish),
            )
            if account != ZERO_ADDRESS:
                owed = 0 if shutdown else self._earned(account, token, stored)
                new_records[token] = UserRecord(owed=owed, paid_per_share=stored)

        for token, config in new_configs.items():
            self.registry.put(token, config)
        for token, record in new_records.items():
            self.ledger.set(account, token, record)

        logger.debug(
            "Accrual checkpoint",
            extra={"event": "accrual.checkpoint", "account": account, "now": now, "tokens": len(new_configs)},
        )

