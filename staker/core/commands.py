"""
Tagged-command entry point for a `RewardStaker`.

``step(staker, cmd)`` runs one command and reports the outcome as a
``StepResult`` instead of raising; ``step_or_raise()`` propagates the
original error. Used by the scenario runner and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

from .errors import RewardError, TokenError
from .staker import RewardStaker
from .types import ZERO_ADDRESS, Address, StepResult

CommandTag = Literal[
    "add_reward",
    "set_rewards_duration",
    "notify_reward_amount",
    "checkpoint",
    "claim",
    "claim_one",
    "set_claim_for",
    "set_claim_for_me",
    "claim_for",
    "recover",
]


@dataclass(frozen=True)
class StakerCommand:
    tag: CommandTag
    caller: Address
    args: Mapping[str, Any] = field(default_factory=dict)


Handler = Callable[[RewardStaker, Address, Mapping[str, Any]], Any]

_DISPATCH: dict[str, Handler] = {
    "add_reward": lambda s, c, a: s.add_reward(c, a["token"], a["distributor"], a["duration"]),
    "set_rewards_duration": lambda s, c, a: s.set_rewards_duration(c, a["token"], a["duration"]),
    "notify_reward_amount": lambda s, c, a: s.notify_reward_amount(c, a["token"], a["amount"]),
    "checkpoint": lambda s, c, a: s.checkpoint(a.get("account", ZERO_ADDRESS)),
    "claim": lambda s, c, a: s.claim(c),
    "claim_one": lambda s, c, a: s.claim_one(c, a["token"]),
    "set_claim_for": lambda s, c, a: s.set_claim_for(c, a["staker"], a["recipient"]),
    "set_claim_for_me": lambda s, c, a: s.set_claim_for_me(c, a["recipient"]),
    "claim_for": lambda s, c, a: s.claim_for(c, a["staker"]),
    "recover": lambda s, c, a: s.recover(c, a["token"], a.get("amount", 0)),
}


def step_or_raise(staker: RewardStaker, cmd: StakerCommand) -> StepResult:
    """Execute a command; errors propagate unchanged.

    Raises:
        ValueError: Unknown command tag.
        KeyError: Missing command argument.
        RewardError: Command rejected by the engine.
        TokenError: A token transfer failed.
    """
    handler = _DISPATCH.get(cmd.tag)
    if handler is None:
        raise ValueError(f"unknown command: {cmd.tag}")
    before = len(staker.events)
    value = handler(staker, cmd.caller, cmd.args)
    return StepResult(accepted=True, events=tuple(staker.events[before:]), value=value)


def step(staker: RewardStaker, cmd: StakerCommand) -> StepResult:
    """Execute a command, reporting rejection in the result."""
    try:
        return step_or_raise(staker, cmd)
    except (RewardError, TokenError) as exc:
        return StepResult(accepted=False, rejection=f"{exc.code}: {exc}")
    except KeyError as exc:
        return StepResult(accepted=False, rejection=f"missing_arg: {exc.args[0]}")
    except ValueError as exc:
        return StepResult(accepted=False, rejection=f"invalid_command: {exc}")
