"""
Per-account, per-token reward ledger.

Records are created lazily on first checkpoint; a missing record reads as
`UserRecord()` (nothing owed, checkpoint 0).
"""

from __future__ import annotations

from typing import Dict, Tuple

from .types import Address, UserRecord


class UserLedger:
    def __init__(self) -> None:
        self._records: Dict[Tuple[Address, Address], UserRecord] = {}

    def get(self, account: Address, token: Address) -> UserRecord:
        return self._records.get((account, token), UserRecord())

    def set(self, account: Address, token: Address, record: UserRecord) -> None:
        self._records[(account, token)] = record

    def owed(self, account: Address, token: Address) -> int:
        return self.get(account, token).owed

    def paid_per_share(self, account: Address, token: Address) -> int:
        return self.get(account, token).paid_per_share

    def settle(self, account: Address, token: Address) -> int:
        """Zero the owed balance and return what it was."""
        record = self.get(account, token)
        if record.owed:
            self._records[(account, token)] = UserRecord(owed=0, paid_per_share=record.paid_per_share)
        return record.owed

    def total_owed(self, token: Address) -> int:
        return sum(r.owed for (_, t), r in self._records.items() if t == token)

    def accounts(self) -> set[Address]:
        return {a for (a, _) in self._records}

    def snapshot(self) -> Dict[Tuple[Address, Address], UserRecord]:
        return dict(self._records)

    def restore(self, snap: Dict[Tuple[Address, Address], UserRecord]) -> None:
        self._records = dict(snap)

    def __repr__(self) -> str:
        return f"UserLedger({len(self._records)} records)"
