import itertools

import pytest

from errors import InsufficientPermissions, Unauthenticated
from permissions import Action, capabilities, can, can_edit_user, require_role

ROLES = ["admin", "manager", "employee"]
ROLE_SETS = [set(c) for n in range(len(ROLES) + 1) for c in itertools.combinations(ROLES, n)]


@pytest.mark.parametrize("role", ROLES)
@pytest.mark.parametrize("allowed", ROLE_SETS, ids=lambda s: "+".join(sorted(s)) or "none")
def test_require_role_allows_iff_member(role, allowed):
    user = {"id": "u", "role": role}
    if role in allowed:
        assert require_role(user, allowed) is user
    else:
        with pytest.raises(InsufficientPermissions):
            require_role(user, allowed)


@pytest.mark.parametrize("allowed", ROLE_SETS, ids=lambda s: "+".join(sorted(s)) or "none")
def test_require_role_without_user(allowed):
    with pytest.raises(Unauthenticated):
        require_role(None, allowed)


def test_unknown_role_is_never_allowed():
    with pytest.raises(InsufficientPermissions):
        require_role({"id": "u", "role": "superuser"}, ROLES)


@pytest.mark.parametrize(
    "action, allowed",
    [
        (Action.MANAGE_USERS, {"admin", "manager"}),
        (Action.CREATE_SHIFTS, {"admin", "manager"}),
        (Action.APPROVE_REQUESTS, {"admin", "manager"}),
        (Action.VIEW_ALL_SHIFTS, {"admin", "manager"}),
        (Action.MANAGE_LOCATIONS, {"admin"}),
        (Action.MANAGE_PAYROLL, {"admin"}),
        (Action.ACCESS_ADMIN_PANEL, {"admin"}),
    ],
)
def test_capability_table(action, allowed):
    for role in ROLES:
        assert can({"id": "u", "role": role}, action) == (role in allowed)
    assert can(None, action) is False


def test_capabilities_map_for_employee():
    caps = capabilities({"id": "u", "role": "employee"})
    assert set(caps) == {a.value for a in Action}
    assert not any(caps.values())


def test_can_edit_user():
    admin = {"id": "a", "role": "admin"}
    manager = {"id": "m", "role": "manager"}
    employee = {"id": "e", "role": "employee"}

    assert can_edit_user(employee, "e")
    assert can_edit_user(manager, "m")
    assert can_edit_user(admin, "e")
    assert not can_edit_user(manager, "e")
    assert not can_edit_user(employee, "m")
    assert not can_edit_user(None, "e")
