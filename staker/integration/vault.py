"""
Reference share vault.

An imperative shell around the accrual core: shares are issued 1:1 against the
underlying asset (share pricing is not modelled), and every balance-changing
call notifies the attached `AccrualObserver` BEFORE balances move:

- deposit: checkpoint the receiver,
- withdraw: checkpoint the owner,
- transfer: checkpoint sender and receiver.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..core.types import ZERO_ADDRESS, AccrualObserver, Address, FungibleToken

logger = logging.getLogger(__name__)


class VaultError(Exception):
    code = "vault_error"


class ShareVault:
    def __init__(self, asset: FungibleToken, management: Address, *, address: Address) -> None:
        if management == ZERO_ADDRESS or address == ZERO_ADDRESS:
            raise VaultError("management and vault address must be non-zero")
        self._asset = asset
        self._management = management
        self.address = address
        self._shares: Dict[Address, int] = {}
        self._total_supply = 0
        self._shutdown = False
        self.observer: Optional[AccrualObserver] = None

    # ---- VaultView ----

    @property
    def asset(self) -> Address:
        return self._asset.address

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: Address) -> int:
        return self._shares.get(account, 0)

    def is_shutdown(self) -> bool:
        return self._shutdown

    def management(self) -> Address:
        return self._management

    # ---- wiring ----

    def attach(self, observer: AccrualObserver) -> None:
        self.observer = observer

    # ---- share operations ----

    def deposit(self, caller: Address, assets: int, receiver: Address) -> int:
        self._require_amount(assets)
        if receiver == ZERO_ADDRESS:
            raise VaultError("receiver must be non-zero")
        if self._shutdown:
            raise VaultError("vault is shut down")

        if self.observer is not None:
            self.observer.on_pre_deposit(receiver)
        self._asset.transfer_from(self.address, caller, self.address, assets)
        self._shares[receiver] = self.balance_of(receiver) + assets
        self._total_supply += assets
        logger.info(
            "Deposit",
            extra={"event": "vault.deposit", "receiver": receiver, "shares": assets},
        )
        return assets

    def withdraw(self, caller: Address, shares: int, receiver: Address, owner: Address) -> int:
        self._require_amount(shares)
        if caller != owner:
            raise VaultError(f"{caller} may not withdraw for {owner}")
        if shares > self.balance_of(owner):
            raise VaultError(f"withdraw exceeds balance ({shares} > {self.balance_of(owner)})")

        if self.observer is not None:
            self.observer.on_pre_withdraw(owner)
        # Pay out first so a failed transfer leaves shares untouched.
        self._asset.transfer(self.address, receiver, shares)
        self._shares[owner] = self.balance_of(owner) - shares
        self._total_supply -= shares
        logger.info(
            "Withdraw",
            extra={"event": "vault.withdraw", "owner": owner, "receiver": receiver, "shares": shares},
        )
        return shares

    def transfer(self, sender: Address, receiver: Address, shares: int) -> bool:
        self._require_amount(shares)
        if receiver == ZERO_ADDRESS:
            raise VaultError("receiver must be non-zero")
        if shares > self.balance_of(sender):
            raise VaultError(f"transfer exceeds balance ({shares} > {self.balance_of(sender)})")

        if self.observer is not None:
            self.observer.on_pre_transfer(sender, receiver)
        self._shares[sender] = self.balance_of(sender) - shares
        self._shares[receiver] = self.balance_of(receiver) + shares
        return True

    def shutdown(self, caller: Address) -> None:
        if caller != self._management:
            raise VaultError(f"{caller} is not management")
        self._shutdown = True
        logger.warning("Vault shut down", extra={"event": "vault.shutdown"})

    @staticmethod
    def _require_amount(amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise VaultError(f"amount must be a positive int, got {amount!r}")

    def __repr__(self) -> str:
        return f"ShareVault({self.address}, supply={self._total_supply})"
