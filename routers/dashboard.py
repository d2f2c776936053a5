from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends

from approvals import pending_approvals
from database import get_db
from deps import RequireAction, get_current_user
from permissions import Action, can
from responses import envelope
from timeclock import hours_worked

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_stats(user=Depends(get_current_user), db=Depends(get_db)):
    now = datetime.now(timezone.utc)
    today = now.date()
    week_start = today - timedelta(days=today.weekday())

    mine = db.checkins.find({"user_id": user["id"]})
    pending = pending_approvals(db)
    if not can(user, Action.APPROVE_REQUESTS):
        # employees only see their own open requests
        pending = {
            "shift_swaps": [s for s in pending["shift_swaps"] if s["requester_id"] == user["id"]],
            "time_off_requests": [r for r in pending["time_off_requests"] if r["user_id"] == user["id"]],
        }

    stats = {
        "hours_today": round(sum(hours_worked(c, now) for c in mine if c["check_in_time"].date() == today), 2),
        "hours_this_week": round(sum(hours_worked(c, now) for c in mine if c["check_in_time"].date() >= week_start), 2),
        "team_online": sum(1 for c in db.checkins.find() if c.get("check_out_time") is None),
        "upcoming_shifts": sum(
            1 for s in db.shifts.find({"user_id": user["id"], "status": "scheduled"})
            if s["date"] >= today.isoformat()
        ),
        "pending_approvals": len(pending["shift_swaps"]) + len(pending["time_off_requests"]),
    }
    return envelope(stats, "Dashboard stats retrieved successfully")


@router.get("/approvals")
async def get_approvals(
    staff=Depends(RequireAction(Action.APPROVE_REQUESTS)),
    db=Depends(get_db),
):
    return envelope(pending_approvals(db), "Pending approvals retrieved successfully")
