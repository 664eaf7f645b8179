"""Integer accrual formulas.

Pure functions over plain ints; all division floors, so rounding only ever
under-distributes.
"""

from __future__ import annotations

from .types import SCALE


def last_time_reward_applicable(now: int, period_finish: int) -> int:
    return min(now, period_finish)


def accrued_per_share(
    elapsed: int,
    reward_rate: int,
    total_supply: int,
    *,
    scale: int = SCALE,
) -> int:
    """Per-share increment for `elapsed` seconds emitted at `reward_rate`."""
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    return (elapsed * reward_rate * scale) // total_supply


def instant_per_share(amount: int, total_supply: int, *, scale: int = SCALE) -> int:
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    return (amount * scale) // total_supply


def earned_amount(
    balance: int,
    reward_per_share: int,
    paid_per_share: int,
    owed: int,
    *,
    scale: int = SCALE,
) -> int:
    """`balance * (reward_per_share - paid_per_share) / scale + owed`."""
    return (balance * (reward_per_share - paid_per_share)) // scale + owed


def linear_rate(
    amount: int,
    duration: int,
    now: int,
    period_finish: int,
    reward_rate: int,
) -> int:
    """
    Emission rate for a new linear period starting at `now`.

    When the previous period is still running its un-emitted remainder
    (`(period_finish - now) * reward_rate`) is folded into the new rate.
    """
    if duration <= 0:
        raise ValueError("duration must be positive")
    if now >= period_finish:
        return amount // duration
    leftover = (period_finish - now) * reward_rate
    return (amount + leftover) // duration


def derived_instant_rate(amount: int, now: int, last_notify_time: int) -> int | None:
    """Informational rate between two instant releases; None if no time elapsed."""
    if now == last_notify_time:
        return None
    return amount // (now - last_notify_time)
