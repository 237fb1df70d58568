"""
Transaction models: an expense fronted by one member and split among others.
"""
from sqlalchemy import (
    Column, String, Numeric, DateTime, ForeignKey, Integer, Text, JSON,
    Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class SplitType(str, enum.Enum):
    """How the total was divided when the transaction was entered."""
    EQUAL = "equal"
    SHARES = "shares"
    ITEMIZED = "itemized"
    ADJUSTMENT = "adjustment"
    ITEMIZED_AI = "itemized_ai"


class Transaction(BaseModel):
    """A single expense paid by one member on behalf of the split members."""
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_trip_date", "trip_id", "date"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False)
    paid_by_member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    split_type = Column(SQLEnum(SplitType), default=SplitType.EQUAL, nullable=False)
    meta = Column(JSON(none_as_null=True), nullable=True)  # e.g. {"draft_id": "..."} for AI-assisted entries

    # Relationships
    trip = relationship("Trip", back_populates="transactions")
    created_by = relationship("TripMember", foreign_keys=[created_by_member_id])
    paid_by = relationship("TripMember", foreign_keys=[paid_by_member_id])
    splits = relationship(
        "TransactionSplit", back_populates="transaction", cascade="all, delete-orphan",
        order_by="TransactionSplit.id"
    )
    items = relationship(
        "TransactionItem", back_populates="transaction", cascade="all, delete-orphan",
        order_by="TransactionItem.id"
    )


class TransactionSplit(BaseModel):
    """One member's share of one transaction."""
    __tablename__ = "transaction_splits"
    __table_args__ = (
        UniqueConstraint("transaction_id", "member_id", name="uq_transaction_splits_tx_member"),
    )

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="splits")
    member = relationship("TripMember")


class TransactionItem(BaseModel):
    """Receipt line item attached to an itemized transaction."""
    __tablename__ = "transaction_items"

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    qty = Column(Integer, nullable=False, default=1)
    raw_data = Column(JSON(none_as_null=True), nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="items")
