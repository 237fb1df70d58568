"""
Trip and TripMember models for group travel expense tracking.
"""
from sqlalchemy import (
    Column, String, Date, Text, Numeric, Enum as SQLEnum, ForeignKey, Integer,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from app.core.config import settings
from app.db.base import BaseModel
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PLANNING = "planning"
    ONGOING = "ongoing"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class MemberRole(str, enum.Enum):
    """Role of a member inside a trip."""
    ADMIN = "admin"
    MEMBER = "member"


class Trip(BaseModel):
    """Trip owning its members, transactions and settlements."""
    __tablename__ = "trips"

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    currency_code = Column(String(3), nullable=False, default=lambda: settings.DEFAULT_CURRENCY)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(SQLEnum(TripStatus), default=TripStatus.PLANNING, nullable=False)
    public_summary_token = Column(String(64), unique=True, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="owned_trips")
    members = relationship(
        "TripMember", back_populates="trip", cascade="all, delete-orphan",
        order_by="TripMember.id"
    )
    transactions = relationship("Transaction", back_populates="trip", cascade="all, delete-orphan")
    settlements = relationship("Settlement", back_populates="trip", cascade="all, delete-orphan")


class TripMember(BaseModel):
    """
    Participant of a single trip: either a registered user or a named guest.

    `balance` is a cached net amount rebuilt by the balance engine on every
    ledger mutation; it is never patched incrementally.
    """
    __tablename__ = "trip_members"
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_members_trip_user"),
        CheckConstraint(
            "(user_id IS NOT NULL AND guest_name IS NULL) OR "
            "(user_id IS NULL AND guest_name IS NOT NULL)",
            name="ck_trip_members_identity"
        ),
        Index("ix_trip_members_trip_guest", "trip_id", "guest_name"),
    )

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    guest_name = Column(String(255), nullable=True)
    guest_contact = Column(String(255), nullable=True)
    role = Column(SQLEnum(MemberRole), default=MemberRole.MEMBER, nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)

    # Relationships
    trip = relationship("Trip", back_populates="members")
    user = relationship("User", back_populates="trip_memberships")

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def display_name(self) -> str:
        """User's name for registered members, guest name otherwise."""
        if self.user is not None:
            return self.user.name
        return self.guest_name or f"Guest #{self.id}"
