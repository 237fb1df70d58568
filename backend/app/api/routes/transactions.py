"""
Transaction routes. Every write rebuilds the trip balances in the same unit of work.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models.user import User
from app.schemas.transaction import TransactionCreate, TransactionUpdate, TransactionResponse
from app.api.dependencies import get_current_user
from app.api.routes.trips import check_trip_access
from app.services import transaction_service

router = APIRouter(prefix="/trips/{trip_id}/transactions", tags=["transactions"])


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    trip_id: int,
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a transaction with its splits."""
    trip, member = check_trip_access(trip_id, current_user.id, db)
    return transaction_service.create_transaction(trip, member, transaction_data, db)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    trip_id: int,
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single transaction with splits and items."""
    check_trip_access(trip_id, current_user.id, db)
    return transaction_service.get_trip_transaction(trip_id, transaction_id, db)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    trip_id: int,
    transaction_id: int,
    transaction_data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a transaction; supplied splits replace the existing ones."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    transaction = transaction_service.get_trip_transaction(trip_id, transaction_id, db)
    return transaction_service.update_transaction(trip, transaction, transaction_data, db)


@router.delete("/{transaction_id}")
async def delete_transaction(
    trip_id: int,
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a transaction."""
    trip, _ = check_trip_access(trip_id, current_user.id, db)
    transaction = transaction_service.get_trip_transaction(trip_id, transaction_id, db)
    transaction_service.delete_transaction(trip, transaction, db)
    return {"message": "Transaction deleted"}
