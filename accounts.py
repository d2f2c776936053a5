"""User account management: creation, edits, removal and password changes."""
import logging
import random
import re
import secrets
from typing import Optional

from auth import hash_password, verify_password
from errors import (
    DuplicateValue,
    FieldErrors,
    InsufficientPermissions,
    InvalidCredentials,
    NotFound,
    ValidationFailed,
)
from permissions import Action, Role, can_edit_user, require

logger = logging.getLogger(__name__)

TEMP_USERNAME_PREFIX = "guest"
TEMP_EMAIL_DOMAIN = "temp.timetidy.com"
TEMP_HOURLY_RATE = 16.0
ADMIN_ONLY_FIELDS = ("role", "is_active", "hourly_rate")


def generate_temp_username(db) -> str:
    while True:
        username = f"{TEMP_USERNAME_PREFIX}{random.randint(10000, 99999)}"
        if db.users.find_one({"username": username}) is None:
            return username


def generate_password() -> str:
    return secrets.token_urlsafe(9)


def username_from_name(first_name: str, last_name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", f"{first_name}{last_name}".lower())[:20]


def _check_unique(db, errors: FieldErrors, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None):
    if username:
        existing = db.users.find_one({"username": username})
        if existing and existing["id"] != exclude_id:
            errors.add("username", "Username already exists")
    if email:
        existing = db.users.find_one({"email": email})
        if existing and existing["id"] != exclude_id:
            errors.add("email", "Email already exists")


def create_user(db, actor: Optional[dict], data: dict) -> tuple[dict, Optional[str]]:
    """
    Create a user and return ``(user, generated_password)``.

    Temporary users get a ``guestNNNNN`` username and a placeholder email when
    none are given. When no password is supplied one is generated, returned to
    the caller once, and the account is flagged ``must_reset_password``.
    """
    if actor is not None:
        require(actor, Action.MANAGE_USERS)

    data = dict(data)
    is_temporary = bool(data.get("is_temporary"))
    email = data.get("email").lower() if data.get("email") else None

    errors = FieldErrors()
    if is_temporary:
        username = data.get("username") or generate_temp_username(db)
        email = email or f"{username}@{TEMP_EMAIL_DOMAIN}"
        first_name = data.get("first_name") or "Temporary"
        last_name = data.get("last_name") or "Employee"
        hourly_rate = data.get("hourly_rate") if data.get("hourly_rate") is not None else TEMP_HOURLY_RATE
    else:
        first_name = (data.get("first_name") or "").strip()
        last_name = (data.get("last_name") or "").strip()
        username = data.get("username")
        if not username and first_name and last_name:
            username = username_from_name(first_name, last_name)
        hourly_rate = data.get("hourly_rate")
        if not username:
            errors.add("username", "Username is required")
        if not email:
            errors.add("email", "Valid email is required")
        if not first_name:
            errors.add("first_name", "First name is required")
        if not last_name:
            errors.add("last_name", "Last name is required")
    errors.raise_if_any()

    password = data.get("password")
    generated = None
    if not password:
        password = generated = generate_password()
    password_hash = hash_password(password)

    with db.transaction():
        _check_unique(db, errors, username, email)
        if errors:
            raise DuplicateValue("User already exists", errors=errors.errors)
        user = db.users.insert_one(
            {
                "username": username,
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "role": data.get("role") or Role.EMPLOYEE.value,
                "is_active": True,
                "is_temporary": is_temporary,
                "must_reset_password": is_temporary or generated is not None,
                "hourly_rate": hourly_rate,
                "phone": data.get("phone"),
                "password_hash": password_hash,
                "last_login_at": None,
            }
        )
    logger.info("Created %s user %s (%s)", user["role"], user["id"], username)
    return user, generated


def update_user(db, actor: dict, user_id: str, changes: dict) -> dict:
    if not can_edit_user(actor, user_id):
        raise InsufficientPermissions()
    user = db.users.get(user_id)
    if not user:
        raise NotFound("User not found")

    changes = {k: v for k, v in changes.items() if v is not None}
    if actor.get("role") != Role.ADMIN.value and any(f in changes for f in ADMIN_ONLY_FIELDS):
        raise InsufficientPermissions("Only administrators can change role, active status or hourly rate")
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    with db.transaction():
        errors = FieldErrors()
        _check_unique(db, errors, None, changes.get("email"), exclude_id=user_id)
        if errors:
            raise DuplicateValue("Email already in use", errors=errors.errors)
        updated = db.users.update_one(user_id, changes, expected_version=user["version"])
    return updated


def delete_user(db, actor: dict, user_id: str) -> None:
    require(actor, Action.MANAGE_USERS)
    if not db.users.delete_one(user_id):
        raise NotFound("User not found")
    logger.info("User %s deleted by %s", user_id, actor["id"])


def change_password(db, user: dict, current_password: Optional[str], new_password: str) -> dict:
    if not current_password:
        raise ValidationFailed.field("current_password", "current_password is required to change password")
    if not verify_password(current_password, user.get("password_hash")):
        raise InvalidCredentials("Current password is incorrect")
    return db.users.update_one(
        user["id"],
        {"password_hash": hash_password(new_password), "must_reset_password": False},
    )


def list_users(db, role: Optional[str] = None, is_active: Optional[bool] = None, search: Optional[str] = None) -> list[dict]:
    query = {}
    if role:
        query["role"] = role
    if is_active is not None:
        query["is_active"] = is_active
    users = db.users.find(query, sort="username")
    if search:
        term = search.lower()
        users = [
            u for u in users
            if any(term in (u.get(f) or "").lower() for f in ("first_name", "last_name", "username", "email"))
        ]
    return users
