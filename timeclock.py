import logging
from datetime import datetime, timezone
from typing import Optional

from config import settings
from errors import AlreadyCheckedIn, ConflictError, FieldErrors, NotFound, ValidationFailed
from geofence import geofence_error
from policy import get_policy

logger = logging.getLogger(__name__)

# Fixed daily threshold. The weekly ``overtime_threshold`` policy value is a
# separate setting and is not applied here.
DAILY_OVERTIME_THRESHOLD_HOURS = 8


def hours_between(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 3600)


def overtime_minutes(check_in_time: datetime, check_out_time: datetime) -> int:
    hours = hours_between(check_in_time, check_out_time)
    # half-up to the nearest minute
    return int(max(0.0, hours - DAILY_OVERTIME_THRESHOLD_HOURS) * 60 + 0.5)


def hours_worked(checkin: dict, now: Optional[datetime] = None) -> float:
    """Elapsed hours of a check-in; open ones count up to ``now``."""
    end = checkin.get("check_out_time") or now or datetime.now(timezone.utc)
    return hours_between(checkin["check_in_time"], end)


def open_checkin(db, user_id: str) -> Optional[dict]:
    for checkin in db.checkins.find({"user_id": user_id}):
        if checkin.get("check_out_time") is None:
            return checkin
    return None


def check_in(
    db,
    user: dict,
    location_id: str,
    shift_id: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    errors = FieldErrors()
    location = db.locations.get(location_id)
    if not location:
        errors.add("location_id", "Location not found")
    elif not location.get("is_active", True):
        errors.add("location_id", "Location is not active")
    if shift_id and not db.shifts.get(shift_id):
        errors.add("shift_id", "Shift not found")
    errors.raise_if_any()

    if settings.GEOFENCING_ENABLED and get_policy(db)["geofencing_enabled"]:
        message = geofence_error(latitude, longitude, location)
        if message:
            raise ValidationFailed(message, errors={"location_id": [message]})

    now = now or datetime.now(timezone.utc)
    with db.transaction():
        if open_checkin(db, user["id"]):
            logger.info("User %s tried to check in twice", user["id"])
            raise AlreadyCheckedIn()
        checkin = db.checkins.insert_one(
            {
                "user_id": user["id"],
                "shift_id": shift_id,
                "location_id": location_id,
                "check_in_time": now,
                "check_out_time": None,
                "latitude": latitude,
                "longitude": longitude,
                "notes": notes,
                "break_duration": 0,
                "overtime_minutes": 0,
            }
        )
    logger.info("User %s checked in at location %s", user["id"], location_id)
    return checkin


def check_out(
    db,
    checkin_id: str,
    notes: Optional[str] = None,
    break_duration: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    checkin = db.checkins.get(checkin_id)
    if not checkin:
        raise NotFound("Check-in not found")
    if checkin.get("check_out_time") is not None:
        raise ConflictError("Already checked out")

    check_out_time = max(now or datetime.now(timezone.utc), checkin["check_in_time"])
    changes = {
        "check_out_time": check_out_time,
        "overtime_minutes": overtime_minutes(checkin["check_in_time"], check_out_time),
        "notes": notes or checkin.get("notes"),
    }
    if break_duration is not None:
        changes["break_duration"] = break_duration

    updated = db.checkins.update_one(checkin_id, changes, expected_version=checkin["version"])
    if updated is None:
        raise NotFound("Check-in not found")
    logger.info("Check-in %s closed, overtime %d min", checkin_id, updated["overtime_minutes"])
    return updated


def list_checkins(
    db,
    user_id: Optional[str] = None,
    location_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    include_active: bool = True,
) -> list[dict]:
    query = {}
    if user_id:
        query["user_id"] = user_id
    if location_id:
        query["location_id"] = location_id
    checkins = db.checkins.find(query, sort="check_in_time")
    if start:
        checkins = [c for c in checkins if c["check_in_time"] >= start]
    if end:
        checkins = [c for c in checkins if c["check_in_time"] <= end]
    if not include_active:
        checkins = [c for c in checkins if c.get("check_out_time") is not None]
    return checkins
