"""
Balance engine: net balances per member and the pairwise debt matrix.

Two views are derived from the same ledger:

* Net balances (recompute mode). Every transaction credits its payer with the
  total and debits each split member with their share; every confirmed
  settlement credits the debtor and debits the creditor. The result is
  written to TripMember.balance, which is only a cache: it is rebuilt from
  scratch on every mutation and never patched incrementally.

* Debt matrix (live mode). Gross debt per (creditor, debtor) pair against
  gross settlement payments for the same pair. Nothing is written.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.trip import TripMember
from app.services.ledger_service import Ledger, read_ledger

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

DEBT_PAID = "paid"
DEBT_UNPAID = "unpaid"


def quantize_amount(amount: Decimal) -> Decimal:
    """Round to 2 fractional digits, half up."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_net_balances(ledger: Ledger, member_ids: Iterable[int] = ()) -> Dict[int, Decimal]:
    """
    Fold a ledger into net balances (positive = is owed, negative = owes).

    Members listed in `member_ids` start at zero and keep their position in
    the returned dict; members only seen in the ledger are appended.
    """
    balances: Dict[int, Decimal] = {member_id: Decimal(0) for member_id in member_ids}

    for tx in ledger.transactions:
        balances[tx.paid_by_member_id] = balances.get(tx.paid_by_member_id, Decimal(0)) + tx.total_amount
        for member_id, amount in tx.splits:
            balances[member_id] = balances.get(member_id, Decimal(0)) - amount

    for s in ledger.settlements:
        # Paying back moves the debtor up towards zero and reduces the creditor's claim
        balances[s.from_member_id] = balances.get(s.from_member_id, Decimal(0)) + s.amount
        balances[s.to_member_id] = balances.get(s.to_member_id, Decimal(0)) - s.amount

    return balances


def get_net_balances(trip_id: int, db: Session) -> Dict[int, Decimal]:
    """Net balance of every member of a trip, derived from the ledger in member id order."""
    member_ids = [
        member_id for (member_id,) in db.query(TripMember.id).filter(
            TripMember.trip_id == trip_id
        ).order_by(TripMember.id).all()
    ]
    return compute_net_balances(read_ledger(trip_id, db), member_ids)


def recalculate_balances(trip_id: int, db: Session) -> None:
    """
    Rebuild the cached balance of every member of a trip.

    Must run inside the caller's unit of work; it flushes but never commits,
    so the ledger write and the new balances land together or not at all.
    """
    db.flush()
    members = db.query(TripMember).populate_existing().filter(
        TripMember.trip_id == trip_id
    ).order_by(TripMember.id).all()

    balances = compute_net_balances(read_ledger(trip_id, db), [m.id for m in members])

    for member in members:
        member.balance = quantize_amount(balances[member.id])
    db.flush()

    logger.info(f"Recalculated balances for trip {trip_id} ({len(members)} members)")


def build_debt_matrix(ledger: Ledger) -> List[dict]:
    """
    Pairwise debts of a ledger with paid/unpaid status.

    A split belonging to the payer creates no debt. Opposite directions
    between the same two members are kept as separate rows; only payments
    in the same direction are deducted. Rows follow the order in which each
    pair first appeared.
    """
    tolerance = settings.BALANCE_TOLERANCE
    debts: Dict[int, Dict[int, Decimal]] = {}     # [creditor][debtor] -> total debt
    payments: Dict[int, Dict[int, Decimal]] = {}  # [creditor][debtor] -> total paid

    for tx in ledger.transactions:
        payer_id = tx.paid_by_member_id
        for debtor_id, amount in tx.splits:
            if debtor_id == payer_id:
                continue
            row = debts.setdefault(payer_id, {})
            row[debtor_id] = row.get(debtor_id, Decimal(0)) + amount

    for s in ledger.settlements:
        row = payments.setdefault(s.to_member_id, {})
        row[s.from_member_id] = row.get(s.from_member_id, Decimal(0)) + s.amount

    results = []
    for creditor_id, debtor_list in debts.items():
        for debtor_id, total_debt in debtor_list.items():
            total_paid = payments.get(creditor_id, {}).get(debtor_id, Decimal(0))
            remaining = total_debt - total_paid

            if remaining <= tolerance:
                status = DEBT_PAID
                remaining = Decimal(0)
            else:
                status = DEBT_UNPAID

            results.append({
                "from_member_id": debtor_id,
                "to_member_id": creditor_id,
                "total_amount": total_debt,
                "paid_amount": total_paid,
                "remaining_amount": remaining,
                "status": status,
            })

    return results


def calculate_trip_balances(trip_id: int, db: Session) -> List[dict]:
    """Debt matrix of a trip from its current ledger. Read only."""
    return build_debt_matrix(read_ledger(trip_id, db))


def net_of_remaining(debts: List[dict], member_ids: Iterable[int]) -> Dict[int, Decimal]:
    """
    Per-member sum of what is still owed to them minus what they still owe,
    according to the remaining amounts of the debt matrix.
    """
    net: Dict[int, Decimal] = {member_id: Decimal(0) for member_id in member_ids}
    for debt in debts:
        net[debt["from_member_id"]] = net.get(debt["from_member_id"], Decimal(0)) - debt["remaining_amount"]
        net[debt["to_member_id"]] = net.get(debt["to_member_id"], Decimal(0)) + debt["remaining_amount"]
    return net
