"""
Ledger reader: loads the balance-relevant view of a trip.

The returned snapshot is plain data, so the balance computations built on it
are pure functions that can be tested without a database.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Tuple
from sqlalchemy.orm import Session, selectinload
from app.models.transaction import Transaction
from app.models.settlement import Settlement, SettlementStatus


def to_decimal(value) -> Decimal:
    """Convert a stored or user-supplied amount to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class LedgerTransaction:
    id: int
    paid_by_member_id: int
    total_amount: Decimal
    splits: Tuple[Tuple[int, Decimal], ...] = ()  # (member_id, amount)


@dataclass(frozen=True)
class LedgerSettlement:
    id: int
    from_member_id: int
    to_member_id: int
    amount: Decimal


@dataclass
class Ledger:
    """Transactions with their splits plus confirmed settlements of one trip."""
    trip_id: int
    transactions: List[LedgerTransaction] = field(default_factory=list)
    settlements: List[LedgerSettlement] = field(default_factory=list)


def read_ledger(trip_id: int, db: Session) -> Ledger:
    """
    Read the ledger of a trip through the caller's session.

    Inside an open unit of work this includes flushed but uncommitted
    changes; pending settlements are left out entirely. Rows already loaded
    into the session are refreshed, so the caller must flush first.
    """
    transactions = db.query(Transaction).populate_existing().options(
        selectinload(Transaction.splits)
    ).filter(
        Transaction.trip_id == trip_id
    ).order_by(Transaction.id).all()

    settlements = db.query(Settlement).populate_existing().filter(
        Settlement.trip_id == trip_id,
        Settlement.status == SettlementStatus.CONFIRMED
    ).order_by(Settlement.id).all()

    return Ledger(
        trip_id=trip_id,
        transactions=[
            LedgerTransaction(
                id=tx.id,
                paid_by_member_id=tx.paid_by_member_id,
                total_amount=to_decimal(tx.total_amount),
                splits=tuple((s.member_id, to_decimal(s.amount)) for s in tx.splits),
            )
            for tx in transactions
        ],
        settlements=[
            LedgerSettlement(
                id=s.id,
                from_member_id=s.from_member_id,
                to_member_id=s.to_member_id,
                amount=to_decimal(s.amount),
            )
            for s in settlements
        ],
    )
