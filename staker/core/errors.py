"""Exception types for the reward accrual engine.

Every error is a precondition failure: the operation that raised it is rolled
back in full by `RewardStaker` before the exception reaches the caller.
``commands.step()`` reports ``RewardError.code`` as the rejection reason.
"""

from __future__ import annotations


class RewardError(Exception):
    """Base class for rejected reward operations."""

    code = "reward_error"


class InvalidAmount(RewardError):
    """Notify amount is zero or not below the sanity ceiling."""

    code = "invalid_amount"


class InvalidDuration(RewardError):
    code = "invalid_duration"


class Unauthorized(RewardError):
    """Caller lacks the role the operation requires."""

    code = "unauthorized"


class DuplicateToken(RewardError):
    code = "duplicate_token"


class UnknownToken(RewardError):
    code = "unknown_token"


class ZeroAddress(RewardError):
    code = "zero_address"


class PeriodNotComplete(RewardError):
    code = "period_not_complete"


class InsufficientEscrow(RewardError):
    """The new emission rate would promise more than the engine holds."""

    code = "insufficient_escrow"


class ProtectedAsset(RewardError):
    code = "protected_asset"


class RecoveryWindowNotElapsed(RewardError):
    code = "recovery_window_not_elapsed"


class ProgramRetired(RewardError):
    """Funding after the reward program was retired."""

    code = "program_retired"


class ReentrantCall(RewardError):
    code = "reentrant_call"


class TokenError(Exception):
    """Raised by token custody when a transfer cannot be honoured."""

    code = "token_error"
