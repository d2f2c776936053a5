from fastapi import APIRouter, Depends

from approvals import cancel_swap, request_swap, review_swap
from database import get_db
from deps import get_current_user, get_staff_user
from models import ReviewIn, SwapCreate
from responses import envelope, serialize_user

router = APIRouter(prefix="/api/swaps", tags=["swaps"])


def serialize_swap(db, doc: dict) -> dict:
    if not doc:
        return {}

    def user(user_id):
        found = db.users.get(user_id) if user_id else None
        return serialize_user(found) if found else None

    return {
        **doc,
        "requester": user(doc.get("requester_id")),
        "original_shift": db.shifts.get(doc["original_shift_id"]),
        "target_user": user(doc.get("target_user_id")),
        "target_shift": db.shifts.get(doc["target_shift_id"]) if doc.get("target_shift_id") else None,
        "reviewer": user(doc.get("reviewed_by")),
    }


@router.get("")
async def get_swaps(user=Depends(get_current_user), db=Depends(get_db)):
    items = db.swaps.find(sort="created_at", reverse=True)
    return envelope([serialize_swap(db, s) for s in items], "Shift swaps retrieved successfully")


@router.post("", status_code=201)
async def post_swap(payload: SwapCreate, user=Depends(get_current_user), db=Depends(get_db)):
    swap = request_swap(
        db,
        user,
        payload.original_shift_id,
        target_user_id=payload.target_user_id,
        target_shift_id=payload.target_shift_id,
        reason=payload.reason,
        deadline=payload.deadline,
    )
    return envelope(serialize_swap(db, swap), "Swap request created successfully")


@router.put("/{swap_id}/approve")
async def approve_swap(
    swap_id: str,
    payload: ReviewIn,
    staff=Depends(get_staff_user),
    db=Depends(get_db),
):
    swap = review_swap(db, swap_id, staff, payload.approved, payload.review_notes, payload.version)
    verdict = "approved" if payload.approved else "rejected"
    return envelope(serialize_swap(db, swap), f"Swap request {verdict} successfully")


@router.post("/{swap_id}/cancel")
async def post_cancel_swap(swap_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    swap = cancel_swap(db, swap_id, user)
    return envelope(serialize_swap(db, swap), "Swap request cancelled successfully")
