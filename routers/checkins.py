from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends

from database import get_db
from deps import get_current_user
from models import CheckInCreate, CheckOutIn
from responses import envelope, serialize_user
from timeclock import check_in, check_out, list_checkins

router = APIRouter(prefix="/api/checkins", tags=["checkins"])


def serialize_checkin(db, doc: dict) -> dict:
    if not doc:
        return {}
    user = db.users.get(doc["user_id"])
    return {
        **doc,
        "user": serialize_user(user) if user else None,
        "location": db.locations.get(doc["location_id"]),
    }


@router.get("")
async def get_checkins(
    user_id: Optional[str] = None,
    location_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_active: bool = True,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None
    end = datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None
    items = list_checkins(db, user_id, location_id, start, end, include_active)
    return envelope([serialize_checkin(db, c) for c in items], "Check-ins retrieved successfully")


@router.post("", status_code=201)
async def post_checkin(payload: CheckInCreate, user=Depends(get_current_user), db=Depends(get_db)):
    checkin = check_in(
        db,
        user,
        payload.location_id,
        shift_id=payload.shift_id,
        latitude=payload.latitude,
        longitude=payload.longitude,
        notes=payload.notes,
    )
    return envelope(serialize_checkin(db, checkin), "Check-in successful")


@router.put("/{checkin_id}/checkout")
async def put_checkout(
    checkin_id: str,
    payload: Optional[CheckOutIn] = None,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    payload = payload or CheckOutIn()
    checkin = check_out(db, checkin_id, notes=payload.notes, break_duration=payload.break_duration)
    return envelope(serialize_checkin(db, checkin), "Check-out successful")
