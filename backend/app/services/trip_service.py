"""
Trip service: trip lifecycle, membership and balance summaries.
"""
import logging
import secrets
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from app.core.config import settings
from app.core.exceptions import LedgerAccessError, LedgerNotFoundError
from app.models.user import User
from app.models.trip import Trip, TripMember, TripStatus, MemberRole
from app.schemas.trip import TripCreate, TripUpdate, MemberCreate
from app.services.balance_service import calculate_trip_balances, net_of_remaining

logger = logging.getLogger(__name__)


def create_trip(owner: User, data: TripCreate, db: Session) -> Trip:
    """Create a trip and add its owner as the first admin member."""
    currency = (data.currency_code or settings.DEFAULT_CURRENCY).upper()
    trip = Trip(
        owner_id=owner.id,
        name=data.name,
        description=data.description,
        currency_code=currency,
        start_date=data.start_date,
        end_date=data.end_date,
        status=TripStatus.PLANNING,
        public_summary_token=secrets.token_hex(16)
    )
    db.add(trip)
    db.flush()

    db.add(TripMember(
        trip_id=trip.id,
        user_id=owner.id,
        role=MemberRole.ADMIN,
        balance=Decimal(0)
    ))
    db.commit()
    db.refresh(trip)

    logger.info(f"Trip {trip.id} created by user {owner.id}")
    return trip


def update_trip(trip: Trip, user: User, data: TripUpdate, db: Session) -> Trip:
    """Update trip details. Any member may edit unless the owner-only policy is on."""
    if settings.TRIP_UPDATE_OWNER_ONLY and trip.owner_id != user.id:
        raise LedgerAccessError("Only the owner can edit this trip")

    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "currency_code" and value:
            value = value.upper()
        if field in ("name", "currency_code", "status") and value is None:
            continue
        setattr(trip, field, value)

    db.commit()
    db.refresh(trip)
    return trip


def delete_trip(trip: Trip, user: User, db: Session) -> None:
    """Delete a trip with its members, transactions and settlements. Owner only."""
    if trip.owner_id != user.id:
        raise LedgerAccessError("Only owner can delete this trip")

    trip_id = trip.id
    db.delete(trip)
    db.commit()
    logger.info(f"Trip {trip_id} deleted by user {user.id}")


def add_member(trip: Trip, data: MemberCreate, db: Session) -> Tuple[TripMember, bool]:
    """
    Add a registered user (by email) or a guest to a trip.

    Returns the member and whether it was newly created; adding a user who
    is already in the trip returns their existing membership.
    """
    if data.type == "user":
        user = db.query(User).filter(User.email == data.email).first()
        if not user:
            raise LedgerNotFoundError("User not found")

        existing = db.query(TripMember).filter(
            TripMember.trip_id == trip.id,
            TripMember.user_id == user.id
        ).first()
        if existing:
            return existing, False

        member = TripMember(trip_id=trip.id, user_id=user.id, role=data.role, balance=Decimal(0))
    else:
        member = TripMember(
            trip_id=trip.id,
            guest_name=data.guest_name.strip(),
            guest_contact=data.guest_contact,
            role=data.role,
            balance=Decimal(0)
        )

    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info(f"Member {member.id} ({data.type}) added to trip {trip.id}")
    return member, True


def get_share_token(trip: Trip, db: Session) -> str:
    """Return the trip's public summary token, creating one if missing."""
    if not trip.public_summary_token:
        trip.public_summary_token = secrets.token_hex(16)
        db.commit()
    return trip.public_summary_token


def get_trip_by_token(token: str, db: Session) -> Trip:
    trip = db.query(Trip).filter(Trip.public_summary_token == token).first()
    if not trip:
        raise LedgerNotFoundError("Trip not found")
    return trip


def _load_members(trip_id: int, db: Session) -> List[TripMember]:
    return db.query(TripMember).options(
        joinedload(TripMember.user)
    ).filter(
        TripMember.trip_id == trip_id
    ).order_by(TripMember.id).all()


def get_my_balances(trip_id: int, member: TripMember, db: Session) -> List[dict]:
    """
    Debt rows involving one member, labelled from their point of view.
    Paid rows are kept so the history stays visible.
    """
    debts = calculate_trip_balances(trip_id, db)
    members = {m.id: m for m in _load_members(trip_id, db)}

    items = []
    for debt in debts:
        if debt["to_member_id"] == member.id:
            other_id, kind = debt["from_member_id"], "owes_you"
        elif debt["from_member_id"] == member.id:
            other_id, kind = debt["to_member_id"], "you_owe"
        else:
            continue

        other = members.get(other_id)
        items.append({
            "member_id": other_id,
            "name": other.display_name if other else "Unknown",
            "type": kind,
            "amount": debt["remaining_amount"],
            "total_amount": debt["total_amount"],
            "status": debt["status"],
        })
    return items


def build_trip_summary(trip_id: int, db: Session, current_user_id: Optional[int] = None) -> dict:
    """
    Overview of who currently carries the load plus the settlement plan.

    The overview nets the remaining amounts of the debt matrix per member and
    drops members within the tolerance of zero. When `current_user_id` is
    None (public view) member ids are left out.
    """
    debts = calculate_trip_balances(trip_id, db)
    members = _load_members(trip_id, db)
    member_map = {m.id: m for m in members}
    public = current_user_id is None

    net = net_of_remaining(debts, [m.id for m in members])
    overview = []
    for member_id, amount in net.items():
        if abs(amount) <= settings.BALANCE_TOLERANCE:
            continue
        m = member_map[member_id]
        item = {"name": m.display_name, "amount": amount}
        if not public:
            item["member_id"] = member_id
            item["is_current_user"] = m.user_id is not None and m.user_id == current_user_id
        overview.append(item)

    plan = []
    for d in debts:
        row = {
            "from_name": member_map[d["from_member_id"]].display_name,
            "to_name": member_map[d["to_member_id"]].display_name,
            "amount": d["remaining_amount"],
            "status": d["status"],
        }
        if not public:
            row.update({
                "from_member_id": d["from_member_id"],
                "to_member_id": d["to_member_id"],
                "total_orig": d["total_amount"],
            })
        plan.append(row)

    return {"overview": overview, "settlements": plan}
