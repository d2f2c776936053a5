from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from database import get_db
from deps import get_current_user, get_staff_user
from models import RecurringShiftCreate, ShiftCreate, ShiftStatus, ShiftUpdate, VersionIn
from responses import envelope, serialize_user
from scheduling import (
    cancel_shift,
    complete_shift,
    create_recurring_shifts,
    create_shift,
    delete_shift,
    get_shift,
    list_shifts,
    mark_no_show,
    update_shift,
)

router = APIRouter(prefix="/api/shifts", tags=["shifts"])


def serialize_shift(db, doc: dict) -> dict:
    if not doc:
        return {}

    user = db.users.get(doc["user_id"]) if doc.get("user_id") else None
    location = db.locations.get(doc["location_id"]) if doc.get("location_id") else None
    return {
        "id": doc.get("id"),
        "user_id": doc.get("user_id"),
        "location_id": doc.get("location_id"),
        "date": doc.get("date"),
        "start_time": doc.get("start_time"),
        "end_time": doc.get("end_time"),
        "role": doc.get("role"),
        "status": doc.get("status"),
        "notes": doc.get("notes"),
        "version": doc.get("version"),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
        "user": serialize_user(user) if user else None,
        "location": location,
    }


@router.get("")
async def get_shifts(
    user_id: Optional[str] = None,
    location_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[ShiftStatus] = None,
    role: Optional[str] = None,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    shifts = list_shifts(db, user_id, location_id, start_date, end_date, status, role)
    return envelope([serialize_shift(db, s) for s in shifts], "Shifts retrieved successfully")


@router.get("/{shift_id}")
async def get_one_shift(shift_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(serialize_shift(db, get_shift(db, shift_id)), "Shift retrieved successfully")


@router.post("", status_code=201)
async def post_shift(payload: ShiftCreate, staff=Depends(get_staff_user), db=Depends(get_db)):
    shift = create_shift(db, staff, payload.model_dump())
    return envelope(serialize_shift(db, shift), "Shift created successfully")


@router.post("/recurring", status_code=201)
async def post_recurring_shifts(
    payload: RecurringShiftCreate,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    data = payload.model_dump(exclude={"days_of_week", "end_date"})
    shifts = create_recurring_shifts(db, staff, data, payload.days_of_week, payload.end_date)
    return envelope([serialize_shift(db, s) for s in shifts], f"Created {len(shifts)} shifts")


@router.put("/{shift_id}")
async def put_shift(
    shift_id: str,
    payload: ShiftUpdate,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"version"})
    shift = update_shift(db, staff, shift_id, changes, payload.version)
    return envelope(serialize_shift(db, shift), "Shift updated successfully")


@router.post("/{shift_id}/cancel")
async def post_cancel_shift(
    shift_id: str,
    payload: Optional[VersionIn] = None,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    shift = cancel_shift(db, staff, shift_id, payload.version if payload else None)
    return envelope(serialize_shift(db, shift), "Shift cancelled successfully")


@router.post("/{shift_id}/complete")
async def post_complete_shift(
    shift_id: str,
    payload: Optional[VersionIn] = None,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    shift = complete_shift(db, staff, shift_id, payload.version if payload else None)
    return envelope(serialize_shift(db, shift), "Shift marked completed")


@router.post("/{shift_id}/no-show")
async def post_no_show(
    shift_id: str,
    payload: Optional[VersionIn] = None,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    shift = mark_no_show(db, staff, shift_id, payload.version if payload else None)
    return envelope(serialize_shift(db, shift), "Shift marked as no-show")


@router.delete("/{shift_id}")
async def remove_shift(shift_id: str, staff=Depends(get_staff_user), db=Depends(get_db)):
    delete_shift(db, staff, shift_id)
    return envelope(None, "Shift deleted successfully")
