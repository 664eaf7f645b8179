"""Invariant checkers for a `RewardStaker`.

Each function returns the tokens for which the invariant is violated (empty =
holds). `check_all()` returns `"<invariant>:<token>"` strings.

Escrow coverage compares settled balances plus still-committed emission with
what the engine actually holds. It does not apply once the program is retired:
retirement sweeps the whole balance regardless of outstanding claims.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List

from .types import Address

if TYPE_CHECKING:
    from .staker import RewardStaker


def inv_update_not_past_finish(s: "RewardStaker") -> List[Address]:
    return [t for t, c in s.registry.items() if c.last_update_time > c.period_finish]


def inv_update_not_from_future(s: "RewardStaker") -> List[Address]:
    now = s.clock()
    return [t for t, c in s.registry.items() if c.last_update_time > now or c.last_notify_time > now]


def inv_escrow_covers_commitments(s: "RewardStaker") -> List[Address]:
    if s.retired:
        return []
    out: List[Address] = []
    for token, config in s.registry.items():
        committed = s.ledger.total_owed(token)
        if not config.is_instant:
            committed += (config.period_finish - config.last_update_time) * config.reward_rate
        if committed > s.bank.token(token).balance_of(s.address):
            out.append(token)
    return out


INVARIANT_REGISTRY: dict[str, Callable[["RewardStaker"], List[Address]]] = {
    "inv_update_not_past_finish": inv_update_not_past_finish,
    "inv_update_not_from_future": inv_update_not_from_future,
    "inv_escrow_covers_commitments": inv_escrow_covers_commitments,
}


def check_all(staker: "RewardStaker") -> list[str]:
    """Return list of violations (empty = all pass)."""
    return [
        f"{inv_id}:{token}"
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        for token in check_fn(staker)
    ]
