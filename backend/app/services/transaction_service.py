"""
Transaction service: validated ledger mutations.

Every create/update/delete runs in a single unit of work together with the
balance rebuild, after all validation has passed.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import LedgerNotFoundError, LedgerValidationError
from app.db.session import atomic, lock_trip
from app.models.trip import Trip, TripMember
from app.models.transaction import Transaction, TransactionSplit, TransactionItem
from app.schemas.transaction import TransactionCreate, TransactionUpdate, SplitIn, ItemIn
from app.services.balance_service import quantize_amount, recalculate_balances
from app.services.ledger_service import to_decimal

logger = logging.getLogger(__name__)


def _reject(trip_id: int, message: str, errors=None):
    logger.warning(f"Rejected transaction on trip {trip_id}: {message} {errors or ''}".rstrip())
    raise LedgerValidationError(message, errors=errors)


def validate_splits(
    trip_id: int,
    splits: List[SplitIn],
    total_amount: Decimal,
    member_ids: Iterable[int]
) -> None:
    """Split members must belong to the trip, appear once, and add up to the total."""
    member_ids = set(member_ids)
    split_member_ids = [s.member_id for s in splits]

    if any(mid not in member_ids for mid in split_member_ids):
        _reject(trip_id, "One or more split members do not belong to this trip")
    if len(set(split_member_ids)) != len(split_member_ids):
        _reject(trip_id, "A member can only appear once in splits")

    total_amount = to_decimal(total_amount)
    sum_splits = sum((to_decimal(s.amount) for s in splits), Decimal(0))
    if abs(sum_splits - total_amount) > settings.BALANCE_TOLERANCE:
        _reject(
            trip_id,
            "Total splits must equal total amount",
            errors={"expected": str(total_amount), "actual": str(sum_splits)}
        )


def _build_splits(splits: List[SplitIn]) -> List[TransactionSplit]:
    return [
        TransactionSplit(member_id=s.member_id, amount=quantize_amount(s.amount))
        for s in splits
    ]


def _build_items(items: List[ItemIn]) -> List[TransactionItem]:
    return [
        TransactionItem(
            name=i.name,
            unit_price=quantize_amount(i.unit_price),
            qty=i.qty,
            raw_data=i.raw_data
        )
        for i in items
    ]


def find_by_draft_id(trip_id: int, draft_id, db: Session) -> Optional[Transaction]:
    """Transaction of a trip whose meta carries the given draft_id, if any."""
    candidates = db.query(Transaction).filter(
        Transaction.trip_id == trip_id,
        Transaction.meta.isnot(None)
    ).all()
    for tx in candidates:
        if isinstance(tx.meta, dict) and tx.meta.get("draft_id") == draft_id:
            return tx
    return None


def get_trip_transaction(trip_id: int, transaction_id: int, db: Session) -> Transaction:
    """Load a transaction, making sure it belongs to the trip."""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not transaction or transaction.trip_id != trip_id:
        raise LedgerNotFoundError("Transaction not found in this trip")
    return transaction


def create_transaction(
    trip: Trip,
    creator: TripMember,
    data: TransactionCreate,
    db: Session
) -> Transaction:
    """Create a transaction with its splits and rebuild the trip balances."""
    member_ids = {m.id for m in trip.members}
    if data.paid_by_member_id not in member_ids:
        _reject(trip.id, "paid_by_member_id does not belong to this trip")
    validate_splits(trip.id, data.splits, data.total_amount, member_ids)

    draft_id = (data.meta or {}).get("draft_id")
    existing = None
    with atomic(db):
        lock_trip(db, trip.id)
        # Checked under the trip lock so concurrent retries of one draft insert once
        if draft_id is not None:
            existing = find_by_draft_id(trip.id, draft_id, db)
        if existing is None:
            transaction = _insert_transaction(trip, creator, data, db)

    if existing is not None:
        logger.info(f"Draft {draft_id} already saved as transaction {existing.id}, skipping create")
        return existing

    db.refresh(transaction)
    logger.info(f"Transaction {transaction.id} created on trip {trip.id} ({transaction.total_amount})")
    return transaction


def _insert_transaction(trip: Trip, creator: TripMember, data: TransactionCreate, db: Session) -> Transaction:
    transaction = Transaction(
        trip_id=trip.id,
        created_by_member_id=creator.id,
        paid_by_member_id=data.paid_by_member_id,
        title=data.title,
        description=data.description,
        date=data.date,
        total_amount=quantize_amount(data.total_amount),
        split_type=data.split_type,
        meta=data.meta,
        splits=_build_splits(data.splits),
        items=_build_items(data.items or []),
    )
    db.add(transaction)
    recalculate_balances(trip.id, db)
    return transaction


def update_transaction(
    trip: Trip,
    transaction: Transaction,
    data: TransactionUpdate,
    db: Session
) -> Transaction:
    """
    Patch a transaction. Supplied splits/items replace the existing sets.

    The split total is checked against the resulting total_amount, whether
    the splits are new or kept.
    """
    changes = data.model_dump(exclude_unset=True)
    member_ids = {m.id for m in trip.members}

    if "paid_by_member_id" in changes and data.paid_by_member_id not in member_ids:
        _reject(trip.id, "paid_by_member_id does not belong to this trip")

    new_total = data.total_amount if data.total_amount is not None else transaction.total_amount
    if data.splits is not None:
        validate_splits(trip.id, data.splits, new_total, member_ids)
    elif data.total_amount is not None:
        current_sum = sum((to_decimal(s.amount) for s in transaction.splits), Decimal(0))
        if abs(current_sum - to_decimal(new_total)) > settings.BALANCE_TOLERANCE:
            _reject(
                trip.id,
                "Total splits must equal total amount",
                errors={"expected": str(new_total), "actual": str(current_sum)}
            )

    with atomic(db):
        lock_trip(db, trip.id)
        for field in ("title", "date", "paid_by_member_id", "split_type"):
            if changes.get(field) is not None:
                setattr(transaction, field, getattr(data, field))
        if "description" in changes:
            transaction.description = data.description
        if data.total_amount is not None:
            transaction.total_amount = quantize_amount(data.total_amount)

        if data.splits is not None:
            # Delete the old set before inserting so the (transaction, member) key stays unique
            transaction.splits.clear()
            db.flush()
            transaction.splits.extend(_build_splits(data.splits))
        if data.items is not None:
            transaction.items.clear()
            transaction.items.extend(_build_items(data.items))

        recalculate_balances(trip.id, db)

    db.refresh(transaction)
    logger.info(f"Transaction {transaction.id} updated on trip {trip.id}")
    return transaction


def delete_transaction(trip: Trip, transaction: Transaction, db: Session) -> None:
    """Delete a transaction with its splits and items, then rebuild balances."""
    transaction_id = transaction.id
    with atomic(db):
        lock_trip(db, trip.id)
        db.delete(transaction)
        recalculate_balances(trip.id, db)

    logger.info(f"Transaction {transaction_id} deleted from trip {trip.id}")
