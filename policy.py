import logging

logger = logging.getLogger(__name__)

POLICY_ID = "company"

DEFAULT_POLICY = {
    "company_name": "TimeTidy Company",
    "time_zone": "Europe/Copenhagen",
    "currency": "DKK",
    "default_shift_duration": 8,
    # weekly hours; the daily check-out overtime in timeclock does not use it
    "overtime_threshold": 40,
    "break_duration": 30,
    "geofencing_enabled": True,
    "default_geofence_radius": 100,
    "pay_period": "monthly",
    "overtime_rate": 1.5,
    "tax_rate": 20,
    "password_expiry": 90,
    "session_timeout": 120,
}


def get_policy(db) -> dict:
    with db.transaction():
        doc = db.policy.get(POLICY_ID)
        if doc is None:
            doc = db.policy.insert_one({"id": POLICY_ID, **DEFAULT_POLICY})
    return doc


def update_policy(db, changes: dict) -> dict:
    current = get_policy(db)
    updated = db.policy.update_one(POLICY_ID, changes, expected_version=current["version"])
    logger.info("Company policy updated: %s", sorted(changes))
    return updated


def reset_policy(db) -> dict:
    current = get_policy(db)
    return db.policy.update_one(POLICY_ID, dict(DEFAULT_POLICY), expected_version=current["version"])
