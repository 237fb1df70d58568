"""
Pydantic schemas for Trip and TripMember entities.
"""
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import List, Literal, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.trip import TripStatus, MemberRole


class TripBase(BaseModel):
    """Base trip schema."""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TripCreate(TripBase):
    """Schema for trip creation. Currency defaults to the configured one."""
    pass


class TripUpdate(BaseModel):
    """Schema for trip update."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TripStatus] = None


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    currency_code: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: TripStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripMemberResponse(BaseModel):
    """Schema for trip member response."""
    id: int
    trip_id: int
    user_id: Optional[int] = None
    guest_name: Optional[str] = None
    guest_contact: Optional[str] = None
    display_name: str
    role: MemberRole
    balance: Decimal

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with members."""
    members: List[TripMemberResponse] = []


class MemberCreate(BaseModel):
    """
    Schema for adding a member. Registered users are looked up by email;
    guests only need a name.
    """
    type: Literal["user", "guest"]
    email: Optional[EmailStr] = None
    guest_name: Optional[str] = Field(default=None, max_length=255)
    guest_contact: Optional[str] = Field(default=None, max_length=255)
    role: MemberRole = MemberRole.MEMBER

    @model_validator(mode="after")
    def check_identity(self):
        """A user member needs an email, a guest member needs a name."""
        if self.type == "user" and not self.email:
            raise ValueError("email is required when type is 'user'")
        if self.type == "guest" and not (self.guest_name and self.guest_name.strip()):
            raise ValueError("guest_name is required when type is 'guest'")
        return self


class ShareLinkResponse(BaseModel):
    """Schema for public summary link."""
    url: str
    token: str
