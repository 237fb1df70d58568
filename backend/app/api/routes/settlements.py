"""
Settlement routes: suggested transfers and recorded payments.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.schemas.settlement import SettlementCreate, SettlementResponse, TransferSuggestion
from app.api.dependencies import get_current_user
from app.api.routes.trips import check_trip_access
from app.services import settlement_service

router = APIRouter(prefix="/trips/{trip_id}/settlements", tags=["settlements"])


@router.get("/suggestions", response_model=List[TransferSuggestion])
async def suggest_settlements(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Suggest a short list of transfers that settles every member."""
    check_trip_access(trip_id, current_user.id, db)
    return settlement_service.suggest_trip_settlements(trip_id, db)


@router.post("", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def create_settlement(
    trip_id: int,
    settlement_data: SettlementCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a confirmed payment between two members."""
    trip, member = check_trip_access(trip_id, current_user.id, db)
    return settlement_service.create_settlement(
        trip,
        member,
        settlement_data.from_member_id,
        settlement_data.to_member_id,
        settlement_data.amount,
        db
    )
