"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.trip import Trip, TripMember, TripStatus, MemberRole
from app.models.transaction import Transaction, TransactionSplit, TransactionItem, SplitType
from app.models.settlement import Settlement, SettlementStatus

__all__ = [
    "User",
    "Trip",
    "TripMember",
    "TripStatus",
    "MemberRole",
    "Transaction",
    "TransactionSplit",
    "TransactionItem",
    "SplitType",
    "Settlement",
    "SettlementStatus",
]
