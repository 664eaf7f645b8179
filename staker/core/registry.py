"""
Ordered registry of reward tokens and their configurations.

Configs are frozen `RewardConfig` values; updates replace the stored value.
Tokens are never removed.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Tuple

from .errors import DuplicateToken, InvalidDuration, UnknownToken, ZeroAddress
from .types import ZERO_ADDRESS, Address, RewardConfig

logger = logging.getLogger(__name__)


class RewardTokenRegistry:
    def __init__(self) -> None:
        self._order: List[Address] = []
        self._configs: Dict[Address, RewardConfig] = {}

    def add(self, token: Address, distributor: Address, duration: int) -> RewardConfig:
        if token == ZERO_ADDRESS or distributor == ZERO_ADDRESS:
            raise ZeroAddress("token and distributor must be non-zero addresses")
        if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
            raise InvalidDuration(f"duration must be a positive int, got {duration!r}")
        if token in self._configs:
            raise DuplicateToken(f"reward token already added: {token}")

        config = RewardConfig(distributor=distributor, duration=duration)
        self._order.append(token)
        self._configs[token] = config
        logger.debug(
            "Reward token registered",
            extra={"event": "registry.add", "token": token, "duration": duration},
        )
        return config

    def get(self, token: Address) -> RewardConfig:
        try:
            return self._configs[token]
        except KeyError:
            raise UnknownToken(f"not a reward token: {token}") from None

    def put(self, token: Address, config: RewardConfig) -> None:
        if token not in self._configs:
            raise UnknownToken(f"not a reward token: {token}")
        self._configs[token] = config

    def __contains__(self, token: object) -> bool:
        return token in self._configs

    def __iter__(self) -> Iterator[Address]:
        return iter(list(self._order))

    def __len__(self) -> int:
        return len(self._order)

    def tokens(self) -> Tuple[Address, ...]:
        return tuple(self._order)

    def items(self) -> Iterator[Tuple[Address, RewardConfig]]:
        for token in list(self._order):
            yield token, self._configs[token]

    def max_period_finish(self) -> int:
        return max((c.period_finish for c in self._configs.values()), default=0)

    def snapshot(self) -> Tuple[List[Address], Dict[Address, RewardConfig]]:
        return list(self._order), dict(self._configs)

    def restore(self, snap: Tuple[List[Address], Dict[Address, RewardConfig]]) -> None:
        order, configs = snap
        self._order = list(order)
        self._configs = dict(configs)

    def __repr__(self) -> str:
        return f"RewardTokenRegistry({len(self._order)} tokens)"
