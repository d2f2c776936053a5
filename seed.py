"""Demo data: the accounts, locations and schedule the UI is built around.

Demo logins: Administrator/admin123, jdoe/password, jsmith/password,
guest12345/temp123.
"""
import logging
from datetime import datetime, timezone

from auth import hash_password

logger = logging.getLogger(__name__)


def _at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


USERS = [
    {
        "username": "Administrator", "password": "admin123", "email": "admin@timetidy.com",
        "first_name": "System", "last_name": "Administrator", "role": "admin",
        "hourly_rate": 30.0, "phone": "+45 12 34 56 78", "created_at": _at(2024, 1, 1),
    },
    {
        "username": "jdoe", "password": "password", "email": "john.doe@example.com",
        "first_name": "John", "last_name": "Doe", "role": "employee",
        "hourly_rate": 18.5, "phone": "+45 98 76 54 32", "created_at": _at(2024, 1, 15),
    },
    {
        "username": "jsmith", "password": "password", "email": "jane.smith@example.com",
        "first_name": "Jane", "last_name": "Smith", "role": "manager",
        "hourly_rate": 22.0, "phone": "+45 11 22 33 44", "created_at": _at(2024, 2, 1),
    },
    {
        "username": "guest12345", "password": "temp123", "email": "temp@example.com",
        "first_name": "Temp", "last_name": "Employee", "role": "employee",
        "hourly_rate": 16.0, "is_temporary": True, "created_at": _at(2024, 12, 20),
    },
]

LOCATIONS = {
    "downtown": {
        "name": "Main Store - Downtown", "address": "123 Main Street", "city": "Copenhagen",
        "postal_code": "1000", "country": "Denmark", "latitude": 55.6761, "longitude": 12.5683,
        "geofence_radius": 50, "is_active": True,
    },
    "norrebro": {
        "name": "Branch Store - Nørrebro", "address": "456 Nørrebrogade", "city": "Copenhagen",
        "postal_code": "2200", "country": "Denmark", "latitude": 55.6894, "longitude": 12.5518,
        "geofence_radius": 50, "is_active": True,
    },
}

# (key, username, location, date, start, end, role, status, notes)
SHIFTS = [
    (1, "jdoe", "downtown", "2024-12-23", "09:00", "17:00", "Cashier", "scheduled", "Morning shift"),
    (2, "jsmith", "downtown", "2024-12-23", "13:00", "21:00", "Manager", "scheduled", "Afternoon shift"),
    (3, "jdoe", "norrebro", "2024-12-24", "10:00", "18:00", "Cashier", "cancelled", "Cancelled due to holiday"),
    (4, "jsmith", "downtown", "2024-12-25", "08:00", "16:00", "Manager", "scheduled", "Christmas Day"),
    (5, "jdoe", "downtown", "2024-12-26", "09:00", "17:00", "Cashier", "scheduled", "Regular shift"),
    (6, "guest12345", "norrebro", "2024-12-27", "14:00", "22:00", "Cashier", "scheduled", "Evening shift"),
    (7, "jsmith", "downtown", "2024-12-28", "09:00", "17:00", "Manager", "scheduled", "Weekend shift"),
    (8, "jdoe", "downtown", "2024-12-29", "10:00", "18:00", "Cashier", "scheduled", "Regular shift"),
    (9, "guest12345", "norrebro", "2024-12-30", "08:00", "16:00", "Cashier", "scheduled", "Morning shift"),
    (10, "jsmith", "downtown", "2024-12-31", "12:00", "20:00", "Manager", "scheduled", "New Year's Eve"),
]


def seed_demo_data(db) -> dict:
    """Populate an empty store. Returns the created user ids by username."""
    users = {}
    for spec in USERS:
        spec = dict(spec)
        password = spec.pop("password")
        is_temporary = spec.pop("is_temporary", False)
        user = db.users.insert_one(
            {
                **spec,
                "updated_at": spec["created_at"],
                "is_active": True,
                "is_temporary": is_temporary,
                "must_reset_password": is_temporary,
                "password_hash": hash_password(password),
                "last_login_at": None,
            }
        )
        users[user["username"]] = user["id"]

    locations = {
        key: db.locations.insert_one({**spec, "created_at": _at(2024, 1, 1), "updated_at": _at(2024, 1, 1)})["id"]
        for key, spec in LOCATIONS.items()
    }

    shifts = {}
    for key, username, location, day, start, end, role, status, notes in SHIFTS:
        shifts[key] = db.shifts.insert_one(
            {
                "user_id": users[username],
                "location_id": locations[location],
                "date": day,
                "start_time": start,
                "end_time": end,
                "role": role,
                "status": status,
                "notes": notes,
                "created_at": _at(2024, 12, 20),
            }
        )["id"]

    for username, shift, start, end, notes, break_minutes in (
        ("jdoe", 1, _at(2024, 12, 23, 9), _at(2024, 12, 23, 17), "On time", 60),
        ("jsmith", 2, _at(2024, 12, 23, 13), _at(2024, 12, 23, 21), "Late by 5 minutes", 45),
    ):
        db.checkins.insert_one(
            {
                "user_id": users[username],
                "shift_id": shifts[shift],
                "location_id": locations["downtown"],
                "check_in_time": start,
                "check_out_time": end,
                "latitude": 55.6761,
                "longitude": 12.5683,
                "notes": notes,
                "break_duration": break_minutes,
                "overtime_minutes": 0,
                "created_at": start,
            }
        )

    db.swaps.insert_one(
        {
            "requester_id": users["jdoe"], "original_shift_id": shifts[1],
            "target_user_id": users["guest12345"], "target_shift_id": None,
            "reason": "Personal emergency", "status": "pending",
            "reviewed_by": None, "reviewed_at": None, "review_notes": None,
            "deadline": _at(2024, 12, 22, 23, 59, 59), "created_at": _at(2024, 12, 20, 10),
        }
    )
    db.swaps.insert_one(
        {
            "requester_id": users["guest12345"], "original_shift_id": shifts[6],
            "target_user_id": users["jdoe"], "target_shift_id": None,
            "reason": "Need more hours", "status": "approved",
            "reviewed_by": users["jsmith"], "reviewed_at": _at(2024, 12, 20, 14),
            "review_notes": "Approved - good reason",
            "deadline": _at(2024, 12, 26, 23, 59, 59), "created_at": _at(2024, 12, 20, 12),
        }
    )

    for username, shift, reason, reviewed_at, notes, created_at in (
        ("jdoe", 5, "Family vacation", _at(2024, 12, 19, 15), "Approved - advance notice given", _at(2024, 12, 18, 10)),
        ("guest12345", 9, "Medical appointment", None, None, _at(2024, 12, 20, 9)),
        ("jdoe", 8, "Personal day", _at(2024, 12, 20, 11), "Approved", _at(2024, 12, 20, 8)),
    ):
        db.timeoff.insert_one(
            {
                "user_id": users[username],
                "shift_id": shifts[shift],
                "reason": reason,
                "status": "approved" if reviewed_at else "pending",
                "reviewed_by": users["jsmith"] if reviewed_at else None,
                "reviewed_at": reviewed_at,
                "review_notes": notes,
                "created_at": created_at,
            }
        )

    logger.info("Seeded demo data: %d users, %d shifts", len(users), len(shifts))
    return users
