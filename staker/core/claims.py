"""
Claim settlement.

Each owed balance is zeroed in the ledger before its token transfer is
issued, so a reentrant claim observes an already-settled account.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from .accrual import AccrualEngine
from .ledger import UserLedger
from .registry import RewardTokenRegistry
from .types import Address, Event, RewardEvent, TokenDirectory

logger = logging.getLogger(__name__)


class ClaimProcessor:
    def __init__(
        self,
        registry: RewardTokenRegistry,
        ledger: UserLedger,
        accrual: AccrualEngine,
        bank: TokenDirectory,
        address: Address,
        emit: Callable[[RewardEvent], None],
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.accrual = accrual
        self.bank = bank
        self.address = address
        self.emit = emit

    def claim(self, staker: Address, recipient: Address) -> Dict[Address, int]:
        """Settle every reward token owed to `staker`, paying `recipient`.

        Returns the amount paid per token (tokens with nothing owed are omitted).
        """
        self.accrual.checkpoint(staker)
        paid: Dict[Address, int] = {}
        for token in self.registry:
            amount = self._pay(staker, recipient, token)
            if amount:
                paid[token] = amount
        return paid

    def claim_one(self, staker: Address, recipient: Address, token: Address) -> int:
        self.registry.get(token)
        self.accrual.checkpoint(staker)
        return self._pay(staker, recipient, token)

    def _pay(self, staker: Address, recipient: Address, token: Address) -> int:
        amount = self.ledger.settle(staker, token)
        if amount == 0:
            return 0
        self.bank.token(token).transfer(self.address, recipient, amount)
        self.emit(RewardEvent(Event.REWARD_PAID, token=token, account=staker, amount=amount, counterparty=recipient))
        logger.info(
            "Reward paid",
            extra={
                "event": "claims.reward_paid",
                "token": token,
                "staker": staker,
                "recipient": recipient,
                "amount": amount,
            },
        )
        return amount
