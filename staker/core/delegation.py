"""
Claim delegation: a staker may name one recipient allowed to claim on its behalf.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from .errors import Unauthorized
from .types import ZERO_ADDRESS, Address, Event, RewardEvent

logger = logging.getLogger(__name__)


class DelegationRegistry:
    def __init__(self, emit: Callable[[RewardEvent], None]) -> None:
        self._recipients: Dict[Address, Address] = {}
        self.emit = emit

    def recipient_of(self, staker: Address) -> Address:
        return self._recipients.get(staker, ZERO_ADDRESS)

    def set(self, staker: Address, recipient: Address) -> None:
        """Point `staker`'s delegated claims at `recipient` (the null address clears it)."""
        if recipient == ZERO_ADDRESS:
            self._recipients.pop(staker, None)
        else:
            self._recipients[staker] = recipient
        self.emit(RewardEvent(Event.CLAIM_RECIPIENT_SET, account=staker, counterparty=recipient))
        logger.info(
            "Claim recipient set",
            extra={"event": "delegation.set", "staker": staker, "recipient": recipient},
        )

    def require_recipient(self, staker: Address, caller: Address) -> None:
        recipient = self._recipients.get(staker)
        if recipient is None or recipient != caller:
            raise Unauthorized(f"{caller} is not the claim recipient for {staker}")

    def snapshot(self) -> Dict[Address, Address]:
        return dict(self._recipients)

    def restore(self, snap: Dict[Address, Address]) -> None:
        self._recipients = dict(snap)
