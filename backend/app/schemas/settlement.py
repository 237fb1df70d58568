"""
Pydantic schemas for settlements, debts and trip summaries.
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal
from app.models.settlement import SettlementStatus


class SettlementCreate(BaseModel):
    """Schema for recording a payment between two members."""
    from_member_id: int
    to_member_id: int
    amount: Decimal = Field(ge=Decimal("0.01"))


class SettlementResponse(BaseModel):
    """Schema for settlement response."""
    id: int
    trip_id: int
    from_member_id: int
    to_member_id: int
    amount: Decimal
    status: SettlementStatus
    created_by_member_id: int
    confirmed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TransferSuggestion(BaseModel):
    """Schema for a single suggested transfer."""
    from_member_id: int
    to_member_id: int
    amount: Decimal

    class Config:
        from_attributes = True


class DebtBalance(BaseModel):
    """One creditor/debtor pair of the debt matrix."""
    from_member_id: int
    to_member_id: int
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    status: Literal["paid", "unpaid"]


class MyBalanceItem(BaseModel):
    """A debt involving the current member, seen from their side."""
    member_id: int
    name: str
    type: Literal["owes_you", "you_owe"]
    amount: Decimal  # remaining
    total_amount: Decimal
    status: Literal["paid", "unpaid"]


class OverviewItem(BaseModel):
    """Net position of one member, from remaining debts."""
    member_id: Optional[int] = None
    name: str
    amount: Decimal
    is_current_user: Optional[bool] = None


class SettlementPlanItem(BaseModel):
    """One row of the settlement plan."""
    from_member_id: Optional[int] = None
    from_name: str
    to_member_id: Optional[int] = None
    to_name: str
    amount: Decimal
    total_orig: Optional[Decimal] = None
    status: Literal["paid", "unpaid"]


class TripSummary(BaseModel):
    """Schema for trip summary."""
    overview: List[OverviewItem]
    settlements: List[SettlementPlanItem]


class PublicTripSummary(TripSummary):
    """Schema for anonymous summary behind a share token."""
    trip_name: str
    currency: str
