"""
Settlement service: suggested transfers and confirmed settlement payments.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import LedgerAccessError, LedgerValidationError
from app.db.session import atomic, lock_trip
from app.models.trip import Trip, TripMember, MemberRole
from app.models.settlement import Settlement, SettlementStatus
from app.services.balance_service import get_net_balances, quantize_amount, recalculate_balances
from app.services.ledger_service import to_decimal

logger = logging.getLogger(__name__)


class Transfer:
    """Represents a single suggested transfer between members."""
    def __init__(self, from_member_id: int, to_member_id: int, amount: Decimal):
        self.from_member_id = from_member_id
        self.to_member_id = to_member_id
        self.amount = amount

    def __repr__(self):
        return f"Transfer({self.from_member_id} -> {self.to_member_id}: {self.amount})"


def suggest_settlements(net_balances: Dict[int, Decimal]) -> List[Transfer]:
    """
    Reduce net balances to a short list of transfers using greedy matching.

    Debtors and creditors are matched in the order they appear in
    `net_balances`; there is no sorting by amount, so the same input always
    gives the same output. Members within the tolerance of zero are skipped.
    Produces at most (non-zero members - 1) transfers.
    """
    tolerance = settings.BALANCE_TOLERANCE

    # [member_id, remaining]; debts are stored as positive amounts
    debtors = [[mid, -to_decimal(bal)] for mid, bal in net_balances.items() if to_decimal(bal) < -tolerance]
    creditors = [[mid, to_decimal(bal)] for mid, bal in net_balances.items() if to_decimal(bal) > tolerance]

    transfers = []
    debt_idx = 0
    cred_idx = 0

    while debt_idx < len(debtors) and cred_idx < len(creditors):
        debtor = debtors[debt_idx]
        creditor = creditors[cred_idx]

        pay = min(debtor[1], creditor[1])
        if pay > tolerance:
            transfers.append(Transfer(debtor[0], creditor[0], quantize_amount(pay)))
            debtor[1] -= pay
            creditor[1] -= pay

        if debtor[1] <= tolerance:
            debt_idx += 1
        if creditor[1] <= tolerance:
            cred_idx += 1

    return transfers


def suggest_trip_settlements(trip_id: int, db: Session) -> List[Transfer]:
    """Suggested transfers for a trip, computed from the live ledger."""
    return suggest_settlements(get_net_balances(trip_id, db))


def create_settlement(
    trip: Trip,
    creator: TripMember,
    from_member_id: int,
    to_member_id: int,
    amount: Decimal,
    db: Session
) -> Settlement:
    """
    Record a confirmed payment from `from_member_id` to `to_member_id`.

    The creator must be the trip owner, a trip admin, or the paying member.
    Validation happens before anything is written; the insert and the
    balance rebuild share one unit of work.
    """
    amount = to_decimal(amount)
    member_ids = {m.id for m in trip.members}

    errors = {}
    if from_member_id not in member_ids:
        errors["from_member_id"] = "Member does not belong to this trip"
    if to_member_id not in member_ids:
        errors["to_member_id"] = "Member does not belong to this trip"
    if from_member_id == to_member_id:
        errors["to_member_id"] = "Must be different from from_member_id"
    if amount < Decimal("0.01"):
        errors["amount"] = "Must be at least 0.01"
    if errors:
        logger.warning(f"Rejected settlement for trip {trip.id}: {errors}")
        raise LedgerValidationError("Validation failed", errors=errors)

    is_privileged = creator.role == MemberRole.ADMIN or (
        creator.user_id is not None and creator.user_id == trip.owner_id
    )
    if not is_privileged and creator.id != from_member_id:
        raise LedgerAccessError("Only the trip admin or the paying member can record this settlement")

    with atomic(db):
        lock_trip(db, trip.id)
        settlement = Settlement(
            trip_id=trip.id,
            from_member_id=from_member_id,
            to_member_id=to_member_id,
            amount=quantize_amount(amount),
            status=SettlementStatus.CONFIRMED,
            created_by_member_id=creator.id,
            confirmed_at=datetime.now(timezone.utc)
        )
        db.add(settlement)
        recalculate_balances(trip.id, db)

    db.refresh(settlement)
    logger.info(
        f"Settlement {settlement.id} recorded on trip {trip.id}: "
        f"{from_member_id} -> {to_member_id} {settlement.amount}"
    )
    return settlement
