"""Role based authorization.

All role checks go through the ``PERMISSIONS`` table so the API and any
client asking ``GET /api/auth/permissions`` see the same answer.
"""
from enum import Enum
from typing import Iterable, Optional

from errors import InsufficientPermissions, Unauthenticated


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Action(str, Enum):
    MANAGE_USERS = "manage_users"
    CREATE_SHIFTS = "create_shifts"
    MANAGE_SHIFTS = "manage_shifts"
    APPROVE_REQUESTS = "approve_requests"
    VIEW_ALL_SHIFTS = "view_all_shifts"
    VIEW_ALL_REPORTS = "view_all_reports"
    MANAGE_LOCATIONS = "manage_locations"
    MANAGE_PAYROLL = "manage_payroll"
    MANAGE_SETTINGS = "manage_settings"
    ACCESS_ADMIN_PANEL = "access_admin_panel"


STAFF = frozenset({Role.ADMIN.value, Role.MANAGER.value})
ADMIN_ONLY = frozenset({Role.ADMIN.value})

PERMISSIONS: dict[Action, frozenset[str]] = {
    Action.MANAGE_USERS: STAFF,
    Action.CREATE_SHIFTS: STAFF,
    Action.MANAGE_SHIFTS: STAFF,
    Action.APPROVE_REQUESTS: STAFF,
    Action.VIEW_ALL_SHIFTS: STAFF,
    Action.VIEW_ALL_REPORTS: STAFF,
    Action.MANAGE_LOCATIONS: ADMIN_ONLY,
    Action.MANAGE_PAYROLL: ADMIN_ONLY,
    Action.MANAGE_SETTINGS: ADMIN_ONLY,
    Action.ACCESS_ADMIN_PANEL: ADMIN_ONLY,
}


def require_role(user: Optional[dict], allowed_roles: Iterable[str]) -> dict:
    if user is None:
        raise Unauthenticated()
    if user.get("role") not in set(allowed_roles):
        raise InsufficientPermissions()
    return user


def can(user: Optional[dict], action: Action) -> bool:
    return user is not None and user.get("role") in PERMISSIONS[action]


def require(user: Optional[dict], action: Action) -> dict:
    return require_role(user, PERMISSIONS[action])


def can_edit_user(actor: Optional[dict], target_user_id: str) -> bool:
    # self or admin; managers cannot edit other users
    if actor is None:
        return False
    return actor["id"] == target_user_id or actor.get("role") == Role.ADMIN.value


def capabilities(user: dict) -> dict[str, bool]:
    return {action.value: can(user, action) for action in Action}
