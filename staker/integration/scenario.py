"""
YAML scenario runner.

A scenario describes a vault + reward staker world and a timeline of steps
(vault share operations, token approvals and staker commands). Running it
produces a JSON-serializable report with each step's outcome and the final
per-account accrual.

Example:

    schema: staker/scenario/v1
    start_time: 1000
    management: mgmt
    reward_tokens: [{address: RWD, distributor: dist, duration: 604800}]
    mint: [{token: RWD, to: dist, amount: 700}]
    steps:
      - {op: deposit, caller: alice, args: {assets: 100}}
      - {op: notify_reward_amount, caller: dist, args: {token: RWD, amount: 700}}
      - {op: claim, caller: alice, advance: 86400}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..config import config_from_dict
from ..core.commands import StakerCommand, step
from ..core.errors import RewardError, TokenError
from ..core.invariants import check_all
from ..core.params import StakerConfig
from ..core.staker import RewardStaker
from ..core.types import Address, RewardEvent
from ..state.balances import InMemoryToken, TokenBank
from ..state.clock import ManualClock
from .vault import ShareVault, VaultError

logger = logging.getLogger(__name__)

SCENARIO_SCHEMA = "staker/scenario/v1"

DEFAULT_ASSET = "0x" + "a5" * 20
DEFAULT_VAULT = "0x" + "7a" * 20
DEFAULT_STAKER = "0x" + "57" * 20

_VAULT_OPS = ("deposit", "withdraw", "transfer", "shutdown")
_TOKEN_OPS = ("approve", "mint")


class ScenarioError(ValueError):
    pass


@dataclass
class StakingWorld:
    """A wired vault + staker over in-memory token custody."""

    clock: ManualClock
    bank: TokenBank
    asset: InMemoryToken
    vault: ShareVault
    staker: RewardStaker
    management: Address


def build_world(
    *,
    management: Address,
    start_time: int = 0,
    asset: Address = DEFAULT_ASSET,
    vault_address: Address = DEFAULT_VAULT,
    staker_address: Address = DEFAULT_STAKER,
    config: StakerConfig = StakerConfig(),
) -> StakingWorld:
    clock = ManualClock(start_time)
    bank = TokenBank()
    asset_token = bank.create_token(asset, symbol="ASSET")
    vault = ShareVault(asset_token, management, address=vault_address)
    staker = RewardStaker(vault, bank, clock, address=staker_address, config=config)
    vault.attach(staker)
    return StakingWorld(clock=clock, bank=bank, asset=asset_token, vault=vault, staker=staker, management=management)


@dataclass
class StepOutcome:
    index: int
    op: str
    time: int
    accepted: bool
    value: Any = None
    rejection: str | None = None
    events: List[Dict[str, Any]] = field(default_factory=list)


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ScenarioError(f"{name} must be a mapping")
    return obj


def _require_list(obj: Any, *, name: str) -> list[Any]:
    if not isinstance(obj, list):
        raise ScenarioError(f"{name} must be a list")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ScenarioError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str, minimum: int = 0) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool) or obj < minimum:
        raise ScenarioError(f"{name} must be an int >= {minimum}")
    return obj


def _event_to_dict(event: RewardEvent) -> Dict[str, Any]:
    return {
        "event": event.event.value,
        "token": event.token,
        "account": event.account,
        "amount": event.amount,
        "counterparty": event.counterparty,
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class ScenarioRunner:
    def __init__(self, spec: Any) -> None:
        root = _require_mapping(spec, name="scenario")
        schema = root.get("schema", SCENARIO_SCHEMA)
        if schema != SCENARIO_SCHEMA:
            raise ScenarioError(f"unsupported scenario schema: {schema}")

        config = config_from_dict(root["config"]) if "config" in root else StakerConfig()
        self.world = build_world(
            management=_require_str(root.get("management"), name="management"),
            start_time=_require_int(root.get("start_time", 0), name="start_time"),
            config=config,
        )
        self.strict = bool(root.get("strict", False))

        for i, tok in enumerate(_require_list(root.get("reward_tokens", []), name="reward_tokens")):
            tok = _require_mapping(tok, name=f"reward_tokens[{i}]")
            address = _require_str(tok.get("address"), name=f"reward_tokens[{i}].address")
            self.world.bank.create_token(address, symbol=str(tok.get("symbol", "")))
            self._run_command(
                "add_reward",
                self.world.management,
                {
                    "token": address,
                    "distributor": _require_str(tok.get("distributor"), name=f"reward_tokens[{i}].distributor"),
                    "duration": _require_int(tok.get("duration"), name=f"reward_tokens[{i}].duration", minimum=1),
                },
                raise_on_reject=True,
            )

        for i, m in enumerate(_require_list(root.get("mint", []), name="mint")):
            m = _require_mapping(m, name=f"mint[{i}]")
            self.world.bank.token(_require_str(m.get("token"), name=f"mint[{i}].token")).mint(
                _require_str(m.get("to"), name=f"mint[{i}].to"),
                _require_int(m.get("amount"), name=f"mint[{i}].amount"),
            )

        self.steps = [
            _require_mapping(s, name=f"steps[{i}]")
            for i, s in enumerate(_require_list(root.get("steps", []), name="steps"))
        ]
        self.accounts: set[Address] = set()

    @classmethod
    def from_file(cls, path: Path | str) -> "ScenarioRunner":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        return cls(data)

    def _run_command(self, op: str, caller: Address, args: Dict[str, Any], *, raise_on_reject: bool = False):
        result = step(self.world.staker, StakerCommand(tag=op, caller=caller, args=args))  # type: ignore[arg-type]
        if raise_on_reject and not result.accepted:
            raise ScenarioError(f"{op} rejected: {result.rejection}")
        return result

    def _run_vault_or_token(self, op: str, caller: Address, args: Dict[str, Any]) -> Any:
        w = self.world
        if op == "deposit":
            assets = _require_int(args.get("assets"), name="deposit.assets", minimum=1)
            receiver = args.get("receiver", caller)
            self.accounts.add(receiver)
            # Fund and approve implicitly so scenarios only describe share flows.
            if args.get("fund", True):
                w.asset.mint(caller, assets)
                w.asset.approve(caller, w.vault.address, w.asset.allowance(caller, w.vault.address) + assets)
            return w.vault.deposit(caller, assets, receiver)
        if op == "withdraw":
            shares = _require_int(args.get("shares"), name="withdraw.shares", minimum=1)
            return w.vault.withdraw(caller, shares, args.get("receiver", caller), caller)
        if op == "transfer":
            receiver = _require_str(args.get("receiver"), name="transfer.receiver")
            self.accounts.add(receiver)
            return w.vault.transfer(caller, receiver, _require_int(args.get("shares"), name="transfer.shares", minimum=1))
        if op == "shutdown":
            return w.vault.shutdown(caller)
        if op == "approve":
            token = w.bank.token(_require_str(args.get("token"), name="approve.token"))
            spender = args.get("spender", w.staker.address)
            return token.approve(caller, spender, _require_int(args.get("amount"), name="approve.amount"))
        if op == "mint":
            token = w.bank.token(_require_str(args.get("token"), name="mint.token"))
            return token.mint(args.get("to", caller), _require_int(args.get("amount"), name="mint.amount"))
        raise ScenarioError(f"unknown op: {op}")

    def run(self) -> Dict[str, Any]:
        w = self.world
        outcomes: List[StepOutcome] = []
        for i, s in enumerate(self.steps):
            op = _require_str(s.get("op"), name=f"steps[{i}].op")
            caller = _require_str(s.get("caller", w.management), name=f"steps[{i}].caller")
            args = dict(_require_mapping(s.get("args", {}), name=f"steps[{i}].args"))
            advance = _require_int(s.get("advance", 0), name=f"steps[{i}].advance")
            if advance:
                w.clock.advance(advance)

            if op in _VAULT_OPS or op in _TOKEN_OPS:
                before = len(w.staker.events)
                try:
                    value = self._run_vault_or_token(op, caller, args)
                    outcome = StepOutcome(
                        i, op, w.clock.now, True, _jsonable(value),
                        events=[_event_to_dict(e) for e in w.staker.events[before:]],
                    )
                except (VaultError, RewardError, TokenError) as exc:
                    outcome = StepOutcome(i, op, w.clock.now, False, rejection=f"{exc.code}: {exc}")
            else:
                if op == "notify_reward_amount" and args.pop("approve", True) and args.get("token") in w.bank:
                    amount = _require_int(args.get("amount"), name=f"steps[{i}].args.amount")
                    token = w.bank.token(args["token"])
                    token.approve(caller, w.staker.address, token.allowance(caller, w.staker.address) + amount)
                else:
                    self.accounts.add(caller)
                result = self._run_command(op, caller, args)
                outcome = StepOutcome(
                    i, op, w.clock.now, result.accepted, _jsonable(result.value), result.rejection,
                    [_event_to_dict(e) for e in result.events],
                )

            expect = s.get("expect")
            if expect is not None and (expect == "accepted") != outcome.accepted:
                raise ScenarioError(f"steps[{i}] ({op}) expected {expect}, got {outcome.rejection or 'accepted'}")
            logger.debug("Scenario step", extra={"event": "scenario.step", "index": i, "op": op, "accepted": outcome.accepted})
            outcomes.append(outcome)

            if self.strict:
                violations = check_all(w.staker)
                if violations:
                    raise ScenarioError(f"invariant violation after steps[{i}]: {', '.join(violations)}")

        return self.report(outcomes)

    def report(self, outcomes: List[StepOutcome]) -> Dict[str, Any]:
        w = self.world
        tokens = w.staker.reward_tokens()
        return {
            "time": w.clock.now,
            "retired": w.staker.retired,
            "total_supply": w.vault.total_supply(),
            "steps": [o.__dict__ for o in outcomes],
            "tokens": {
                t: {
                    "reward_rate": w.staker.reward_data(t).reward_rate,
                    "period_finish": w.staker.reward_data(t).period_finish,
                    "reward_per_share": w.staker.reward_per_share(t),
                    "escrow": w.bank.token(t).balance_of(w.staker.address),
                    "minted": w.bank.token(t).total_supply(),
                }
                for t in tokens
            },
            "accounts": {
                a: {
                    "shares": w.vault.balance_of(a),
                    "earned": {t: w.staker.earned(a, t) for t in tokens},
                    "wallet": {t: w.bank.token(t).balance_of(a) for t in tokens},
                }
                for a in sorted(self.accounts)
            },
            "invariant_violations": check_all(w.staker),
        }


def run_scenario_file(path: Path | str) -> Dict[str, Any]:
    return ScenarioRunner.from_file(path).run()
