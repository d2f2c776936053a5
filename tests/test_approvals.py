import pytest

from approvals import (
    cancel_swap,
    pending_approvals,
    request_swap,
    request_time_off,
    review_swap,
    review_time_off,
)
from errors import InsufficientPermissions, InvalidTransition, NotFound, StaleWrite, ValidationFailed


def test_direct_swap_approved_by_manager(db, employee, manager, shift_on):
    s1 = shift_on("jdoe", "2024-12-23")
    s2 = shift_on("jsmith", "2024-12-23")

    swap = request_swap(db, employee, s1["id"], target_user_id=manager["id"], target_shift_id=s2["id"], reason="Doctor")
    assert swap["status"] == "pending"
    assert swap["reviewed_by"] is None and swap["reviewed_at"] is None

    reviewed = review_swap(db, swap["id"], manager, approved=True, notes="ok")

    assert reviewed["status"] == "approved"
    assert reviewed["reviewed_by"] == manager["id"]
    assert reviewed["review_notes"] == "ok"
    assert reviewed["reviewed_at"] >= reviewed["created_at"]
    # ownership is not reassigned on approval
    assert db.shifts.get(s1["id"])["user_id"] == employee["id"]
    assert db.shifts.get(s2["id"])["user_id"] == manager["id"]
    assert db.shifts.get(s1["id"])["status"] == db.shifts.get(s2["id"])["status"] == "scheduled"


def test_second_review_fails(db, employee, manager, admin, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-26")["id"])
    review_swap(db, swap["id"], manager, approved=False)

    with pytest.raises(InvalidTransition):
        review_swap(db, swap["id"], admin, approved=True)
    stored = db.swaps.get(swap["id"])
    assert stored["status"] == "rejected"
    assert stored["reviewed_by"] == manager["id"]


def test_review_with_stale_version(db, employee, manager, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-26")["id"])
    db.swaps.update_one(swap["id"], {"reason": "edited"})

    with pytest.raises(StaleWrite):
        review_swap(db, swap["id"], manager, approved=True, expected_version=swap["version"])
    assert db.swaps.get(swap["id"])["status"] == "pending"


def test_employee_cannot_review(db, employee, temp_employee, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-26")["id"])
    with pytest.raises(InsufficientPermissions):
        review_swap(db, swap["id"], temp_employee, approved=True)


def test_review_unknown_swap(db, manager):
    with pytest.raises(NotFound):
        review_swap(db, "missing", manager, approved=True)


def test_open_swap_has_no_target(db, employee, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-29")["id"])
    assert swap["target_user_id"] is None
    assert swap["target_shift_id"] is None


def test_target_user_inferred_from_target_shift(db, employee, manager, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-26")["id"], target_shift_id=shift_on("jsmith", "2024-12-25")["id"])
    assert swap["target_user_id"] == manager["id"]


def test_requester_must_own_the_shift(db, employee, shift_on):
    with pytest.raises(ValidationFailed) as exc:
        request_swap(db, employee, shift_on("jsmith", "2024-12-25")["id"])
    assert "original_shift_id" in exc.value.errors


def test_swap_validation_collects_every_problem(db, employee, temp_employee, shift_on):
    with pytest.raises(ValidationFailed) as exc:
        request_swap(
            db,
            employee,
            shift_on("jdoe", "2024-12-24")["id"],  # cancelled
            target_user_id=temp_employee["id"],
            target_shift_id=shift_on("jsmith", "2024-12-25")["id"],
        )
    assert set(exc.value.errors) == {"original_shift_id", "target_shift_id"}


def test_requester_can_cancel_pending_swap(db, employee, manager, shift_on):
    swap = request_swap(db, employee, shift_on("jdoe", "2024-12-29")["id"])

    with pytest.raises(InsufficientPermissions):
        cancel_swap(db, swap["id"], manager)
    cancelled = cancel_swap(db, swap["id"], employee)
    assert cancelled["status"] == "cancelled"
    # withdrawal is not a review
    assert cancelled["reviewed_by"] is None and cancelled["reviewed_at"] is None
    with pytest.raises(InvalidTransition):
        review_swap(db, swap["id"], manager, approved=True)


def test_time_off_lifecycle(db, employee, manager, shift_on):
    request = request_time_off(db, employee, shift_on("jdoe", "2024-12-23")["id"], "Wedding")
    assert request["status"] == "pending"

    reviewed = review_time_off(db, request["id"], manager, approved=True, notes="Enjoy")
    assert reviewed["status"] == "approved"
    assert reviewed["reviewed_by"] == manager["id"]
    assert reviewed["reviewed_at"] is not None

    with pytest.raises(InvalidTransition):
        review_time_off(db, request["id"], manager, approved=False)


def test_time_off_requires_existing_shift(db, employee):
    with pytest.raises(ValidationFailed) as exc:
        request_time_off(db, employee, "missing")
    assert exc.value.errors == {"shift_id": ["Shift not found"]}


def test_pending_approvals(db, user_ids):
    pending = pending_approvals(db)
    assert len(pending["shift_swaps"]) == 1
    assert len(pending["time_off_requests"]) == 1
    assert pending["time_off_requests"][0]["user_id"] == user_ids["guest12345"]
