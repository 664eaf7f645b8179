"""Property tests: random operation sequences against a live vault + staker.

Checked after every step:
- conservation: paid + still-earned never exceeds what was funded,
- monotonicity of every token's reward-per-share,
- engine invariants (`check_all`),
- idempotent checkpoints.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from staker.core import check_all

from tests.helpers import ALICE, BOB, BONUS, CAROL, DAY, RWD, WEEK, add_reward, deposit, make_world, notify, wallet

ACCOUNTS = (ALICE, BOB, CAROL)
TOKENS = (RWD, BONUS)

_op = st.one_of(
    st.tuples(st.just("deposit"), st.sampled_from(ACCOUNTS), st.integers(1, 10_000)),
    st.tuples(st.just("withdraw"), st.sampled_from(ACCOUNTS), st.integers(1, 10_000)),
    st.tuples(st.just("transfer"), st.sampled_from(ACCOUNTS), st.sampled_from(ACCOUNTS), st.integers(1, 10_000)),
    st.tuples(st.just("advance"), st.integers(1, 3 * DAY)),
    st.tuples(st.just("notify"), st.sampled_from(TOKENS), st.integers(1, 10**12)),
    st.tuples(st.just("claim"), st.sampled_from(ACCOUNTS)),
)


def _apply(w, op, funded):
    kind = op[0]
    if kind == "deposit":
        deposit(w, op[1], op[2])
    elif kind == "withdraw":
        shares = min(op[2], w.vault.balance_of(op[1]))
        if shares:
            w.vault.withdraw(op[1], shares, op[1], op[1])
    elif kind == "transfer":
        shares = min(op[3], w.vault.balance_of(op[1]))
        if shares:
            w.vault.transfer(op[1], op[2], shares)
    elif kind == "advance":
        w.clock.advance(op[1])
    elif kind == "notify":
        if w.vault.total_supply():
            funded[op[1]] += op[2]
        notify(w, op[1], op[2])
    elif kind == "claim":
        w.staker.claim(op[1])


@settings(max_examples=75, deadline=None)
@given(ops=st.lists(_op, min_size=1, max_size=40))
def test_random_sequences_hold_invariants(ops):
    w = make_world()
    add_reward(w, RWD, WEEK)
    add_reward(w, BONUS, 1)
    funded = {t: 0 for t in TOKENS}
    last_rps = {t: 0 for t in TOKENS}

    for op in ops:
        _apply(w, op, funded)

        for t in TOKENS:
            distributed = sum(wallet(w, t, a) + w.staker.earned(a, t) for a in ACCOUNTS)
            assert distributed <= funded[t]

            rps = w.staker.reward_per_share(t)
            assert rps >= last_rps[t]
            last_rps[t] = rps

        assert check_all(w.staker) == []

    w.staker.checkpoint(ALICE)
    snapshot = {t: w.staker.reward_data(t) for t in TOKENS}
    w.staker.checkpoint(ALICE)
    assert {t: w.staker.reward_data(t) for t in TOKENS} == snapshot


@settings(max_examples=50, deadline=None)
@given(
    balances=st.lists(st.integers(1, 10**9), min_size=1, max_size=3),
    amount=st.integers(1, 10**18),
)
def test_instant_release_credits_pro_rata(balances, amount):
    w = make_world()
    add_reward(w, BONUS, 1)
    for account, bal in zip(ACCOUNTS, balances):
        deposit(w, account, bal)
    supply = sum(balances)

    notify(w, BONUS, amount)
    per_share = amount * 10**18 // supply
    for account, bal in zip(ACCOUNTS, balances):
        assert w.staker.earned(account, BONUS) == bal * per_share // 10**18
    assert w.staker.reward_data(BONUS).reward_rate == 0
