"""Shift creation, edits, status transitions and availability."""
import logging
from datetime import date, timedelta
from typing import Optional, Union

from errors import FieldErrors, InvalidTransition, NotFound, StaleWrite
from permissions import Action, require

logger = logging.getLogger(__name__)

SHIFT_TRANSITIONS = {
    "scheduled": {"cancelled", "completed", "no_show"},
    "pending": {"cancelled"},
}
TERMINAL_STATUSES = {"cancelled", "completed", "no_show"}
RECURRING_DEFAULT_DAYS = 30
RECURRING_MAX_DAYS = 366


def _iso(value: Union[date, str, None]) -> Optional[str]:
    if isinstance(value, date):
        return value.isoformat()
    return value


def _js_weekday(day: date) -> int:
    # 0 = Sunday ... 6 = Saturday
    return (day.weekday() + 1) % 7


def _check_references(db, errors: FieldErrors, fields: dict) -> None:
    if "user_id" in fields and not db.users.get(fields["user_id"]):
        errors.add("user_id", "User not found")
    if "location_id" in fields and not db.locations.get(fields["location_id"]):
        errors.add("location_id", "Location not found")
    start, end = fields.get("start_time"), fields.get("end_time")
    if start and end and start >= end:
        errors.add("end_time", "End time must be after start time")


def _new_shift(data: dict, day: Union[date, str]) -> dict:
    return {
        "user_id": data["user_id"],
        "location_id": data["location_id"],
        "date": _iso(day),
        "start_time": data["start_time"],
        "end_time": data["end_time"],
        "role": data["role"],
        "status": "scheduled",
        "notes": data.get("notes"),
    }


def create_shift(db, actor: dict, data: dict) -> dict:
    require(actor, Action.CREATE_SHIFTS)
    errors = FieldErrors()
    _check_references(db, errors, data)
    errors.raise_if_any()

    shift = db.shifts.insert_one(_new_shift(data, data["date"]))
    logger.info("Shift %s created for user %s on %s by %s", shift["id"], shift["user_id"], shift["date"], actor["id"])
    return shift


def create_recurring_shifts(
    db,
    actor: dict,
    data: dict,
    days_of_week: list[int],
    range_end: Optional[date] = None,
) -> list[dict]:
    """
    One shift per day from ``data["date"]`` through ``range_end`` (both
    inclusive) whose weekday is in ``days_of_week``. Without ``range_end`` the
    range runs for ``RECURRING_DEFAULT_DAYS`` days.
    """
    require(actor, Action.CREATE_SHIFTS)
    start = data["date"] if isinstance(data["date"], date) else date.fromisoformat(data["date"])
    end = range_end or start + timedelta(days=RECURRING_DEFAULT_DAYS)

    errors = FieldErrors()
    _check_references(db, errors, data)
    if any(d not in range(7) for d in days_of_week):
        errors.add("days_of_week", "Days of week must be between 0 (Sunday) and 6 (Saturday)")
    if end < start:
        errors.add("end_date", "End date must not be before the start date")
    elif (end - start).days > RECURRING_MAX_DAYS:
        errors.add("end_date", f"Recurring shifts can span at most {RECURRING_MAX_DAYS} days")
    errors.raise_if_any()

    wanted = set(days_of_week)
    shifts = []
    day = start
    while day <= end:
        if _js_weekday(day) in wanted:
            shifts.append(db.shifts.insert_one(_new_shift(data, day)))
        day += timedelta(days=1)

    logger.info("Created %d recurring shifts for user %s (%s..%s)", len(shifts), data["user_id"], start, end)
    return shifts


def get_shift(db, shift_id: str) -> dict:
    shift = db.shifts.get(shift_id)
    if not shift:
        raise NotFound("Shift not found")
    return shift


def update_shift(db, actor: dict, shift_id: str, changes: dict, expected_version: Optional[int] = None) -> dict:
    require(actor, Action.MANAGE_SHIFTS)
    shift = get_shift(db, shift_id)
    if shift["status"] in TERMINAL_STATUSES:
        raise InvalidTransition(f"Cannot edit a {shift['status']} shift")
    if expected_version is not None and expected_version != shift["version"]:
        raise StaleWrite()

    changes = {k: _iso(v) for k, v in changes.items() if v is not None}
    errors = FieldErrors()
    _check_references(
        db,
        errors,
        {
            **{k: v for k, v in changes.items() if k in ("user_id", "location_id")},
            "start_time": changes.get("start_time", shift["start_time"]),
            "end_time": changes.get("end_time", shift["end_time"]),
        },
    )
    errors.raise_if_any()

    updated = db.shifts.update_one(shift_id, changes, expected_version=shift["version"])
    if updated is None:
        raise NotFound("Shift not found")
    return updated


def transition_shift(db, shift_id: str, new_status: str, expected_version: Optional[int] = None) -> dict:
    shift = get_shift(db, shift_id)
    current = shift["status"]
    if new_status not in SHIFT_TRANSITIONS.get(current, set()):
        if current == new_status:
            raise InvalidTransition(f"Shift is already {current}")
        raise InvalidTransition(f"Cannot change shift from {current} to {new_status}")
    if expected_version is not None and expected_version != shift["version"]:
        raise StaleWrite()

    updated = db.shifts.update_one(shift_id, {"status": new_status}, expected_version=shift["version"])
    if updated is None:
        raise NotFound("Shift not found")
    logger.info("Shift %s: %s -> %s", shift_id, current, new_status)
    return updated


def cancel_shift(db, actor: dict, shift_id: str, expected_version: Optional[int] = None) -> dict:
    require(actor, Action.MANAGE_SHIFTS)
    return transition_shift(db, shift_id, "cancelled", expected_version)


def complete_shift(db, actor: dict, shift_id: str, expected_version: Optional[int] = None) -> dict:
    require(actor, Action.MANAGE_SHIFTS)
    return transition_shift(db, shift_id, "completed", expected_version)


def mark_no_show(db, actor: dict, shift_id: str, expected_version: Optional[int] = None) -> dict:
    require(actor, Action.MANAGE_SHIFTS)
    return transition_shift(db, shift_id, "no_show", expected_version)


def delete_shift(db, actor: dict, shift_id: str) -> None:
    require(actor, Action.MANAGE_SHIFTS)
    if not db.shifts.delete_one(shift_id):
        raise NotFound("Shift not found")
    logger.info("Shift %s deleted by %s", shift_id, actor["id"])


def list_shifts(
    db,
    user_id: Optional[str] = None,
    location_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
    role: Optional[str] = None,
) -> list[dict]:
    query = {}
    for key, value in (("user_id", user_id), ("location_id", location_id), ("status", status), ("role", role)):
        if value:
            query[key] = value
    shifts = db.shifts.find(query, sort="date")
    if start_date:
        shifts = [s for s in shifts if s["date"] >= _iso(start_date)]
    if end_date:
        shifts = [s for s in shifts if s["date"] <= _iso(end_date)]
    return shifts


def is_user_available(db, user_id: str, on_date: Union[date, str]) -> dict:
    """
    A user is unavailable on ``on_date`` while an approved time-off request
    points at a shift dated on or after it. The linked shift's date stands in
    for the end of the leave.
    """
    on_date = _iso(on_date)
    cutoff = None
    for request in db.timeoff.find({"user_id": user_id, "status": "approved"}):
        shift = db.shifts.get(request["shift_id"])
        if shift and shift["date"] >= on_date and (cutoff is None or shift["date"] > cutoff[0]):
            cutoff = (shift["date"], request.get("reason"))

    if cutoff is None:
        return {"available": True, "warning": None}
    until, reason = cutoff
    return {
        "available": False,
        "warning": f"User is on time off until {until}. Reason: {reason or 'not specified'}",
    }
