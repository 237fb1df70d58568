"""
Public routes that need no login.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.settlement import PublicTripSummary
from app.services import trip_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/trips/{token}", response_model=PublicTripSummary, response_model_exclude_none=True)
async def get_public_summary(token: str, db: Session = Depends(get_db)):
    """Anonymous trip summary behind a share token."""
    trip = trip_service.get_trip_by_token(token, db)
    summary = trip_service.build_trip_summary(trip.id, db)
    return {"trip_name": trip.name, "currency": trip.currency_code, **summary}
