"""
Tests for net balances and the pairwise debt matrix.
"""
from decimal import Decimal
from app.services.balance_service import build_debt_matrix, compute_net_balances, net_of_remaining
from app.services.ledger_service import Ledger, LedgerSettlement, LedgerTransaction

A, B, C = 1, 2, 3


def D(value) -> Decimal:
    return Decimal(str(value))


def scenario_ledger() -> Ledger:
    """A pays 300 split evenly, B pays 90 for B and C, B pays A back 50."""
    return Ledger(
        trip_id=1,
        transactions=[
            LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(300),
                              splits=((A, D(100)), (B, D(100)), (C, D(100)))),
            LedgerTransaction(id=2, paid_by_member_id=B, total_amount=D(90),
                              splits=((B, D(30)), (C, D(60)))),
        ],
        settlements=[
            LedgerSettlement(id=1, from_member_id=B, to_member_id=A, amount=D(50)),
        ],
    )


def test_self_split_creates_no_debt():
    ledger = Ledger(trip_id=1, transactions=[
        LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(100),
                          splits=((A, D(50)), (B, D(50)))),
    ])

    rows = build_debt_matrix(ledger)

    assert len(rows) == 1
    assert rows[0]["from_member_id"] == B
    assert rows[0]["to_member_id"] == A
    assert rows[0]["total_amount"] == D(50)
    assert all(r["from_member_id"] != r["to_member_id"] for r in rows)


def test_scenario_debt_matrix():
    rows = build_debt_matrix(scenario_ledger())

    assert [(r["to_member_id"], r["from_member_id"]) for r in rows] == [(A, B), (A, C), (B, C)]
    assert rows[0] == {
        "from_member_id": B, "to_member_id": A,
        "total_amount": D(100), "paid_amount": D(50),
        "remaining_amount": D(50), "status": "unpaid",
    }
    assert rows[1]["paid_amount"] == 0
    assert rows[1]["remaining_amount"] == D(100)
    assert rows[1]["status"] == "unpaid"
    assert rows[2]["total_amount"] == D(60)
    assert rows[2]["remaining_amount"] == D(60)
    assert rows[2]["status"] == "unpaid"


def test_scenario_net_balances_are_zero_sum():
    balances = compute_net_balances(scenario_ledger(), [A, B, C])

    assert balances == {A: D(150), B: D(10), C: D(-160)}
    assert sum(balances.values()) == 0


def test_compute_net_balances_is_pure():
    ledger = scenario_ledger()
    assert compute_net_balances(ledger, [A, B, C]) == compute_net_balances(ledger, [A, B, C])


def test_listed_members_without_activity_stay_at_zero():
    balances = compute_net_balances(Ledger(trip_id=1), [A, B, C])
    assert balances == {A: 0, B: 0, C: 0}
    assert list(balances) == [A, B, C]


def test_remaining_within_tolerance_is_paid_and_clamped():
    ledger = Ledger(
        trip_id=1,
        transactions=[LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(100),
                                        splits=((B, D(100)),))],
        settlements=[LedgerSettlement(id=1, from_member_id=B, to_member_id=A, amount=D("99.995"))],
    )

    row = build_debt_matrix(ledger)[0]

    assert row["status"] == "paid"
    assert row["remaining_amount"] == 0
    assert row["paid_amount"] == D("99.995")


def test_overpayment_is_paid_with_zero_remaining():
    ledger = Ledger(
        trip_id=1,
        transactions=[LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(40),
                                        splits=((B, D(40)),))],
        settlements=[LedgerSettlement(id=1, from_member_id=B, to_member_id=A, amount=D(55))],
    )

    row = build_debt_matrix(ledger)[0]

    assert row["status"] == "paid"
    assert row["remaining_amount"] == 0


def test_opposite_directions_are_not_netted():
    ledger = Ledger(trip_id=1, transactions=[
        LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(30), splits=((B, D(30)),)),
        LedgerTransaction(id=2, paid_by_member_id=B, total_amount=D(20), splits=((A, D(20)),)),
    ])

    rows = build_debt_matrix(ledger)

    assert len(rows) == 2
    assert {(r["from_member_id"], r["to_member_id"], r["remaining_amount"]) for r in rows} == {
        (B, A, D(30)),
        (A, B, D(20)),
    }


def test_payment_in_other_direction_does_not_reduce_debt():
    ledger = Ledger(
        trip_id=1,
        transactions=[LedgerTransaction(id=1, paid_by_member_id=A, total_amount=D(30), splits=((B, D(30)),))],
        settlements=[LedgerSettlement(id=1, from_member_id=A, to_member_id=B, amount=D(30))],
    )

    rows = build_debt_matrix(ledger)

    assert len(rows) == 1
    assert rows[0]["paid_amount"] == 0
    assert rows[0]["status"] == "unpaid"


def test_net_of_remaining_moves_remaining_amounts():
    rows = build_debt_matrix(scenario_ledger())

    net = net_of_remaining(rows, [A, B, C])

    assert net == {A: D(150), B: D(10), C: D(-160)}
    assert sum(net.values()) == 0
