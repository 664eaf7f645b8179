"""
Core reward accrual engine
"""

from .accrual import AccrualEngine
from .claims import ClaimProcessor
from .commands import StakerCommand, step, step_or_raise
from .delegation import DelegationRegistry
from .errors import (
    DuplicateToken,
    InsufficientEscrow,
    InvalidAmount,
    InvalidDuration,
    PeriodNotComplete,
    ProgramRetired,
    ProtectedAsset,
    RecoveryWindowNotElapsed,
    ReentrantCall,
    RewardError,
    TokenError,
    Unauthorized,
    UnknownToken,
    ZeroAddress,
)
from .invariants import check_all
from .ledger import UserLedger
from .params import StakerConfig
from .recovery import RecoveryModule
from .registry import RewardTokenRegistry
from .scheduler import DistributionScheduler
from .staker import RewardStaker
from .types import (
    INSTANT_DURATION,
    MAX_NOTIFY,
    RECOVERY_COOLDOWN,
    SCALE,
    ZERO_ADDRESS,
    Event,
    InstantMode,
    LinearMode,
    RewardConfig,
    RewardEvent,
    StepResult,
    UserRecord,
    emission_mode,
)

__all__ = [
    "AccrualEngine",
    "ClaimProcessor",
    "DelegationRegistry",
    "DistributionScheduler",
    "RecoveryModule",
    "RewardStaker",
    "RewardTokenRegistry",
    "UserLedger",
    "StakerConfig",
    "StakerCommand",
    "step",
    "step_or_raise",
    "check_all",
    "RewardConfig",
    "UserRecord",
    "RewardEvent",
    "Event",
    "StepResult",
    "LinearMode",
    "InstantMode",
    "emission_mode",
    "SCALE",
    "INSTANT_DURATION",
    "MAX_NOTIFY",
    "RECOVERY_COOLDOWN",
    "ZERO_ADDRESS",
    "RewardError",
    "InvalidAmount",
    "InvalidDuration",
    "Unauthorized",
    "DuplicateToken",
    "UnknownToken",
    "ZeroAddress",
    "PeriodNotComplete",
    "InsufficientEscrow",
    "ProtectedAsset",
    "RecoveryWindowNotElapsed",
    "ProgramRetired",
    "ReentrantCall",
    "TokenError",
]
