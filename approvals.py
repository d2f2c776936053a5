"""Shift swap and time-off requests.

Both request kinds start ``pending`` and are reviewed exactly once. A swap can
also be withdrawn by its requester while still pending. Approving a swap does
not move shift ownership; the shifts stay as they are.

``reviewed_by`` and ``reviewed_at`` are set exactly when a reviewer approved
or rejected the request. A withdrawn (``cancelled``) swap leaves them empty.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from errors import FieldErrors, InsufficientPermissions, InvalidTransition, NotFound, StaleWrite, ValidationFailed
from permissions import Action, require

logger = logging.getLogger(__name__)

PENDING = "pending"


def request_swap(
    db,
    requester: dict,
    original_shift_id: str,
    target_user_id: Optional[str] = None,
    target_shift_id: Optional[str] = None,
    reason: Optional[str] = None,
    deadline: Optional[datetime] = None,
) -> dict:
    errors = FieldErrors()

    shift = db.shifts.get(original_shift_id)
    if not shift:
        errors.add("original_shift_id", "Original shift not found")
    elif shift["user_id"] != requester["id"]:
        errors.add("original_shift_id", "You can only request swaps for your own shifts")
    elif shift["status"] != "scheduled":
        errors.add("original_shift_id", "Only scheduled shifts can be swapped")

    if target_shift_id:
        target_shift = db.shifts.get(target_shift_id)
        if not target_shift:
            errors.add("target_shift_id", "Target shift not found")
        elif target_shift_id == original_shift_id:
            errors.add("target_shift_id", "A shift cannot be swapped with itself")
        elif target_user_id is None:
            target_user_id = target_shift["user_id"]
        elif target_shift["user_id"] != target_user_id:
            errors.add("target_shift_id", "Target shift does not belong to the target user")

    if target_user_id:
        if not db.users.get(target_user_id):
            errors.add("target_user_id", "Target user not found")
        elif target_user_id == requester["id"]:
            errors.add("target_user_id", "You cannot swap a shift with yourself")
    errors.raise_if_any()

    swap = db.swaps.insert_one(
        {
            "requester_id": requester["id"],
            "original_shift_id": original_shift_id,
            "target_user_id": target_user_id,
            "target_shift_id": target_shift_id,
            "reason": reason,
            "status": PENDING,
            "reviewed_by": None,
            "reviewed_at": None,
            "review_notes": None,
            "deadline": deadline,
        }
    )
    logger.info("Swap %s requested by %s for shift %s", swap["id"], requester["id"], original_shift_id)
    return swap


def _review(collection, label: str, request_id: str, reviewer: dict, approved: bool,
            notes: Optional[str], expected_version: Optional[int]) -> dict:
    require(reviewer, Action.APPROVE_REQUESTS)
    doc = collection.get(request_id)
    if not doc:
        raise NotFound(f"{label} not found")
    if doc["status"] != PENDING:
        raise InvalidTransition(f"{label} has already been {doc['status']}")
    if expected_version is not None and expected_version != doc["version"]:
        raise StaleWrite()

    status = "approved" if approved else "rejected"
    updated = collection.update_one(
        request_id,
        {
            "status": status,
            "reviewed_by": reviewer["id"],
            "reviewed_at": datetime.now(timezone.utc),
            "review_notes": notes,
        },
        expected_version=doc["version"],
    )
    if updated is None:
        raise NotFound(f"{label} not found")
    logger.info("%s %s %s by %s", label, request_id, status, reviewer["id"])
    return updated


def review_swap(db, swap_id: str, reviewer: dict, approved: bool, notes: Optional[str] = None,
                expected_version: Optional[int] = None) -> dict:
    return _review(db.swaps, "Swap request", swap_id, reviewer, approved, notes, expected_version)


def cancel_swap(db, swap_id: str, actor: dict) -> dict:
    swap = db.swaps.get(swap_id)
    if not swap:
        raise NotFound("Swap request not found")
    if swap["requester_id"] != actor["id"]:
        raise InsufficientPermissions("Only the requester can cancel a swap request")
    if swap["status"] != PENDING:
        raise InvalidTransition(f"Swap request has already been {swap['status']}")
    updated = db.swaps.update_one(swap_id, {"status": "cancelled"}, expected_version=swap["version"])
    logger.info("Swap %s cancelled by requester", swap_id)
    return updated


def request_time_off(db, user: dict, shift_id: str, reason: Optional[str] = None) -> dict:
    if not db.shifts.get(shift_id):
        raise ValidationFailed.field("shift_id", "Shift not found")

    request = db.timeoff.insert_one(
        {
            "user_id": user["id"],
            "shift_id": shift_id,
            "reason": reason,
            "status": PENDING,
            "reviewed_by": None,
            "reviewed_at": None,
            "review_notes": None,
        }
    )
    logger.info("Time off %s requested by %s for shift %s", request["id"], user["id"], shift_id)
    return request


def review_time_off(db, request_id: str, reviewer: dict, approved: bool, notes: Optional[str] = None,
                    expected_version: Optional[int] = None) -> dict:
    return _review(db.timeoff, "Time off request", request_id, reviewer, approved, notes, expected_version)


def pending_approvals(db) -> dict:
    return {
        "shift_swaps": db.swaps.find({"status": PENDING}, sort="created_at"),
        "time_off_requests": db.timeoff.find({"status": PENDING}, sort="created_at"),
    }
