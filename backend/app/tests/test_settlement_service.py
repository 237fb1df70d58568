"""
Tests for the greedy settlement suggestion.
"""
import pytest
from decimal import Decimal
from app.services.settlement_service import suggest_settlements


def D(value) -> Decimal:
    return Decimal(str(value))


def apply_transfers(balances, transfers):
    result = dict(balances)
    for t in transfers:
        result[t.from_member_id] += t.amount
        result[t.to_member_id] -= t.amount
    return result


def test_single_debtor_pays_creditors_in_order():
    transfers = suggest_settlements({1: D(150), 2: D(10), 3: D(-160)})

    assert [(t.from_member_id, t.to_member_id, t.amount) for t in transfers] == [
        (3, 1, D(150)),
        (3, 2, D(10)),
    ]


def test_order_follows_input_not_amount():
    transfers = suggest_settlements({1: D(-10), 2: D(-50), 3: D(60)})

    assert [(t.from_member_id, t.to_member_id, t.amount) for t in transfers] == [
        (1, 3, D(10)),
        (2, 3, D(50)),
    ]


def test_near_zero_members_are_skipped():
    assert suggest_settlements({1: D("0.005"), 2: D("-0.005"), 3: D(0)}) == []


def test_amounts_are_rounded_to_cents():
    transfers = suggest_settlements({1: D("10.005"), 2: D("-10.005")})

    assert len(transfers) == 1
    assert transfers[0].amount == D("10.01")


def test_same_input_gives_same_output():
    balances = {1: D(20), 2: D(-5), 3: D(-15), 4: D(30), 5: D(-30)}

    first = [(t.from_member_id, t.to_member_id, t.amount) for t in suggest_settlements(balances)]
    second = [(t.from_member_id, t.to_member_id, t.amount) for t in suggest_settlements(balances)]

    assert first == second


@pytest.mark.parametrize("balances", [
    {1: D("66.67"), 2: D("-33.33"), 3: D("-33.34")},
    {1: D(20), 2: D(-5), 3: D(-15), 4: D(30), 5: D(-30)},
    {1: D("-12.50"), 2: D("7.25"), 3: D("5.25")},
    {1: D("100"), 2: D("-25"), 3: D("-25"), 4: D("-25"), 5: D("-25")},
    {1: D("-0.50"), 2: D("0.20"), 3: D("0.30"), 4: D("0.004"), 5: D("-0.004")},
])
def test_transfers_settle_everyone(balances):
    transfers = suggest_settlements(balances)

    settled = apply_transfers(balances, transfers)
    non_zero = [b for b in balances.values() if abs(b) > D("0.01")]

    assert all(abs(b) <= D("0.01") for b in settled.values())
    assert len(transfers) <= len(non_zero) - 1
    assert all(t.amount > D("0.01") for t in transfers)
