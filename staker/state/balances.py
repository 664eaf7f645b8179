"""
Multi-token custody with deterministic ordering.

Implements BalanceTable[Holder, Token] -> Amount plus per-token allowances, and
`InMemoryToken`, a fungible-token view over one column of the table. All
tokens of a `TokenBank` share one table so a whole bank can be snapshotted and
restored as a unit.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from ..core.errors import TokenError
from ..core.types import ZERO_ADDRESS, Address

logger = logging.getLogger(__name__)

Amount = int  # Non-negative integer (arbitrary precision)

# Called after a transfer has been booked: (token, sender, recipient, amount).
TransferHook = Callable[[Address, Address, Address, Amount], None]


class BalanceTable:
    """
    Deterministic balance table mapping (holder, token) -> amount.

    Note: balances live in a plain dict. Callers that serialize or hash the
    table should sort keys explicitly.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, Address], Amount] = {}
        self._allowances: Dict[Tuple[Address, Address, Address], Amount] = {}

    def get(self, holder: Address, token: Address) -> Amount:
        """Get balance for (holder, token). Returns 0 if not found."""
        return self._balances.get((holder, token), 0)

    def set(self, holder: Address, token: Address, amount: Amount) -> None:
        """
        Set balance for (holder, token).

        Raises:
            TokenError: If amount is negative
        """
        if amount < 0:
            raise TokenError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((holder, token), None)
        else:
            self._balances[(holder, token)] = amount

    def add(self, holder: Address, token: Address, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            TokenError: If resulting balance would be negative
        """
        current = self.get(holder, token)
        new_balance = current + delta
        if new_balance < 0:
            raise TokenError(f"Insufficient balance: {current} + {delta} = {new_balance} < 0")
        self.set(holder, token, new_balance)

    def subtract(self, holder: Address, token: Address, delta: Amount) -> None:
        if delta < 0:
            raise TokenError(f"Delta must be non-negative: {delta}")
        self.add(holder, token, -delta)

    def allowance(self, owner: Address, spender: Address, token: Address) -> Amount:
        return self._allowances.get((owner, spender, token), 0)

    def set_allowance(self, owner: Address, spender: Address, token: Address, amount: Amount) -> None:
        if amount < 0:
            raise TokenError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender, token), None)
        else:
            self._allowances[(owner, spender, token)] = amount

    def total(self, token: Address) -> Amount:
        return sum(amount for (_, t), amount in self._balances.items() if t == token)

    def get_balances_for_token(self, token: Address) -> Dict[Address, Amount]:
        return {holder: amount for (holder, t), amount in self._balances.items() if t == token}

    def snapshot(self) -> Tuple[Dict, Dict]:
        return dict(self._balances), dict(self._allowances)

    def restore(self, snap: Tuple[Dict, Dict]) -> None:
        balances, allowances = snap
        self._balances = dict(balances)
        self._allowances = dict(allowances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


class InMemoryToken:
    """Fungible token backed by a shared `BalanceTable`.

    `on_transfer`, when set, is invoked after every booked transfer; it stands
    in for recipient callbacks (and is how reentrancy is exercised in tests).
    """

    def __init__(self, address: Address, table: BalanceTable, *, symbol: str = "") -> None:
        if address == ZERO_ADDRESS:
            raise TokenError("token address must be non-zero")
        self.address = address
        self.symbol = symbol or address[:10]
        self._table = table
        self.on_transfer: Optional[TransferHook] = None

    def balance_of(self, account: Address) -> Amount:
        return self._table.get(account, self.address)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._table.allowance(owner, spender, self.address)

    def total_supply(self) -> Amount:
        return self._table.total(self.address)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> bool:
        self._table.set_allowance(owner, spender, self.address, amount)
        return True

    def mint(self, to: Address, amount: Amount) -> bool:
        self._validate(to, amount)
        self._table.add(to, self.address, amount)
        return True

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> bool:
        self._validate(recipient, amount)
        balance = self.balance_of(sender)
        if balance < amount:
            raise TokenError(f"{self.symbol}: transfer amount exceeds balance ({amount} > {balance})")
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> bool:
        self._validate(recipient, amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise TokenError(f"{self.symbol}: insufficient allowance ({amount} > {allowed})")
        balance = self.balance_of(owner)
        if balance < amount:
            raise TokenError(f"{self.symbol}: transfer amount exceeds balance ({amount} > {balance})")
        self._table.set_allowance(owner, spender, self.address, allowed - amount)
        self._move(owner, recipient, amount)
        return True

    def _validate(self, recipient: Address, amount: Amount) -> None:
        if recipient == ZERO_ADDRESS:
            raise TokenError(f"{self.symbol}: transfer to the zero address")
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise TokenError(f"{self.symbol}: invalid amount {amount!r}")

    def _move(self, sender: Address, recipient: Address, amount: Amount) -> None:
        self._table.subtract(sender, self.address, amount)
        self._table.add(recipient, self.address, amount)
        logger.debug(
            "Token transfer",
            extra={"event": "token.transfer", "token": self.symbol, "from": sender, "to": recipient, "amount": amount},
        )
        if self.on_transfer is not None:
            self.on_transfer(self.address, sender, recipient, amount)

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol})"


class TokenBank:
    """Registry of `InMemoryToken`s sharing one balance table."""

    def __init__(self) -> None:
        self.table = BalanceTable()
        self._tokens: Dict[Address, InMemoryToken] = {}

    def create_token(self, address: Address, *, symbol: str = "") -> InMemoryToken:
        if address in self._tokens:
            raise TokenError(f"token already exists: {address}")
        token = InMemoryToken(address, self.table, symbol=symbol)
        self._tokens[address] = token
        return token

    def token(self, address: Address) -> InMemoryToken:
        try:
            return self._tokens[address]
        except KeyError:
            raise TokenError(f"no token contract at {address}") from None

    def __contains__(self, address: object) -> bool:
        return address in self._tokens

    def snapshot(self) -> Tuple[Dict, Dict]:
        return self.table.snapshot()

    def restore(self, snap: Tuple[Dict, Dict]) -> None:
        self.table.restore(snap)
