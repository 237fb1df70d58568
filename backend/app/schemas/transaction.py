"""
Pydantic schemas for Transaction entity.
"""
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from app.models.transaction import SplitType


class SplitIn(BaseModel):
    """One member's share in a create/update request."""
    member_id: int
    amount: Decimal = Field(ge=0)


class ItemIn(BaseModel):
    """Receipt line item in a create/update request."""
    name: str = Field(max_length=255)
    unit_price: Decimal = Field(ge=0)
    qty: int = Field(default=1, ge=1)
    raw_data: Optional[Dict[str, Any]] = None


class TransactionCreate(BaseModel):
    """Schema for transaction creation."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    date: datetime
    total_amount: Decimal = Field(ge=0)
    paid_by_member_id: int
    split_type: SplitType
    splits: List[SplitIn] = Field(min_length=1)
    items: Optional[List[ItemIn]] = None
    meta: Optional[Dict[str, Any]] = None  # {"draft_id": ...} makes the create idempotent


class TransactionUpdate(BaseModel):
    """
    Schema for transaction update. Omitted fields are left untouched;
    `splits` and `items`, when present, replace the whole set.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime] = None
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    paid_by_member_id: Optional[int] = None
    split_type: Optional[SplitType] = None
    splits: Optional[Annotated[List[SplitIn], Field(min_length=1)]] = None
    items: Optional[List[ItemIn]] = None


class SplitResponse(BaseModel):
    """Schema for split response."""
    member_id: int
    amount: Decimal

    class Config:
        from_attributes = True


class ItemResponse(BaseModel):
    """Schema for item response."""
    id: int
    name: str
    unit_price: Decimal
    qty: int
    raw_data: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    id: int
    trip_id: int
    created_by_member_id: int
    paid_by_member_id: int
    title: str
    description: Optional[str] = None
    date: datetime
    total_amount: Decimal
    split_type: SplitType
    meta: Optional[Dict[str, Any]] = None
    splits: List[SplitResponse] = []
    items: List[ItemResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
