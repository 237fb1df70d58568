"""
Settlement model: a recorded payment from a debtor to a creditor.
"""
from sqlalchemy import Column, Numeric, DateTime, ForeignKey, Integer, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class SettlementStatus(str, enum.Enum):
    """Only confirmed settlements count toward balances."""
    PENDING = "pending"
    CONFIRMED = "confirmed"


class Settlement(BaseModel):
    """Payment between two members of the same trip."""
    __tablename__ = "settlements"
    __table_args__ = (
        Index("ix_settlements_trip_status", "trip_id", "status"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    from_member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False)  # debtor, who paid
    to_member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False)  # creditor, who received
    amount = Column(Numeric(14, 2), nullable=False)
    status = Column(SQLEnum(SettlementStatus), default=SettlementStatus.PENDING, nullable=False)
    created_by_member_id = Column(Integer, ForeignKey("trip_members.id"), nullable=False)
    confirmed_at = Column(DateTime, nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="settlements")
    from_member = relationship("TripMember", foreign_keys=[from_member_id])
    to_member = relationship("TripMember", foreign_keys=[to_member_id])
    created_by = relationship("TripMember", foreign_keys=[created_by_member_id])
