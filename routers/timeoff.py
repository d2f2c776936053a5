from fastapi import APIRouter, Depends

from approvals import request_time_off, review_time_off
from database import get_db
from deps import get_current_user, get_staff_user
from models import ReviewIn, TimeOffCreate
from responses import envelope, serialize_user

router = APIRouter(prefix="/api/timeoff", tags=["timeoff"])


def serialize_time_off(db, doc: dict) -> dict:
    if not doc:
        return {}
    user = db.users.get(doc["user_id"])
    reviewer = db.users.get(doc["reviewed_by"]) if doc.get("reviewed_by") else None
    return {
        **doc,
        "user": serialize_user(user) if user else None,
        "shift": db.shifts.get(doc["shift_id"]),
        "reviewer": serialize_user(reviewer) if reviewer else None,
    }


@router.get("")
async def get_time_off(user=Depends(get_current_user), db=Depends(get_db)):
    items = db.timeoff.find(sort="created_at", reverse=True)
    return envelope([serialize_time_off(db, r) for r in items], "Time off requests retrieved successfully")


@router.post("", status_code=201)
async def post_time_off(payload: TimeOffCreate, user=Depends(get_current_user), db=Depends(get_db)):
    request = request_time_off(db, user, payload.shift_id, payload.reason)
    return envelope(serialize_time_off(db, request), "Time off request created successfully")


@router.put("/{request_id}/approve")
async def approve_time_off(
    request_id: str,
    payload: ReviewIn,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    request = review_time_off(db, request_id, staff, payload.approved, payload.review_notes, payload.version)
    verdict = "approved" if payload.approved else "rejected"
    return envelope(serialize_time_off(db, request), f"Time off request {verdict} successfully")
