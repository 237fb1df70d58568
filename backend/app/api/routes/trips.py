"""
Trip management routes: trips, members, balances and summaries.
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Tuple
from app.core.config import settings
from app.db.session import get_db
from app.models.user import User
from app.models.trip import Trip, TripMember, MemberRole
from app.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    TripMemberResponse, MemberCreate, ShareLinkResponse
)
from app.schemas.settlement import DebtBalance, MyBalanceItem, TripSummary
from app.api.dependencies import get_current_user
from app.services import trip_service
from app.services.balance_service import calculate_trip_balances

router = APIRouter(prefix="/trips", tags=["trips"])


def check_trip_access(trip_id: int, user_id: int, db: Session) -> Tuple[Trip, TripMember]:
    """Check if user is a member of the trip. Returns the trip and the membership."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )

    member = db.query(TripMember).filter(
        TripMember.trip_id == trip_id,
        TripMember.user_id == user_id
    ).first()

    if not member:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this trip"
        )

    return trip, member


@router.get("", response_model=List[TripResponse])
async def list_trips(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all trips the current user is a member of, newest first."""
    trips = db.query(Trip).join(TripMember).filter(
        TripMember.user_id == current_user.id
    ).order_by(Trip.created_at.desc(), Trip.id.desc()).all()
    return trips


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new trip."""
    return trip_service.create_trip(current_user, trip_data, db)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get trip details with members."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    return trip


@router.patch("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip details."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    return trip_service.update_trip(trip, current_user, trip_data, db)


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a trip (owner only)."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    trip_service.delete_trip(trip, current_user, db)
    return {"message": "Trip deleted"}


@router.get("/{trip_id}/members", response_model=List[TripMemberResponse])
async def list_members(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List trip members."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    return trip.members


@router.post("/{trip_id}/members", response_model=TripMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    trip_id: int,
    member_data: MemberCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a registered user or a guest to the trip (admin only)."""
    trip, member = check_trip_access(trip_id, current_user.id, db)
    if member.role != MemberRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admin can add members"
        )

    new_member, created = trip_service.add_member(trip, member_data, db)
    if not created:
        response.status_code = status.HTTP_200_OK
    return new_member


@router.get("/{trip_id}/balances", response_model=List[DebtBalance])
async def get_trip_balances(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Every creditor/debtor pair with total, paid and remaining amounts."""
    check_trip_access(trip_id, current_user.id, db)
    return calculate_trip_balances(trip_id, db)


@router.get("/{trip_id}/balances/me", response_model=List[MyBalanceItem])
async def get_my_balances(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Debts owed to or by the current user in this trip."""
    _, member = check_trip_access(trip_id, current_user.id, db)
    return trip_service.get_my_balances(trip_id, member, db)


@router.get("/{trip_id}/summary", response_model=TripSummary)
async def get_trip_summary(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Net overview per member and the settlement plan."""
    check_trip_access(trip_id, current_user.id, db)
    return trip_service.build_trip_summary(trip_id, db, current_user_id=current_user.id)


@router.post("/{trip_id}/share", response_model=ShareLinkResponse)
async def share_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get (or create) the public summary link of a trip."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    token = trip_service.get_share_token(trip, db)
    url = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/api/public/trips/{token}"
    return {"url": url, "token": token}
