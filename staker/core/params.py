"""Engine parameters (immutable, validated on construction)."""

from __future__ import annotations

from dataclasses import dataclass, fields

from .types import MAX_NOTIFY, RECOVERY_COOLDOWN, SCALE


@dataclass(frozen=True)
class StakerConfig:
    # Fixed-point factor for reward-per-share values.
    scale: int = SCALE
    # Notify amounts must be strictly below this ceiling.
    max_notify: int = MAX_NOTIFY
    # Seconds after the last period ends before reward tokens can be swept.
    recovery_cooldown: int = RECOVERY_COOLDOWN

    def __post_init__(self) -> None:
        for f in fields(self):
            v = getattr(self, f.name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{f.name} must be an int")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive: {self.scale}")
        if self.max_notify <= 1:
            raise ValueError(f"max_notify must be > 1: {self.max_notify}")
        if self.recovery_cooldown < 0:
            raise ValueError(f"recovery_cooldown must be non-negative: {self.recovery_cooldown}")
