from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from accounts import create_user, delete_user, list_users, update_user
from database import get_db
from deps import get_current_user, get_staff_user
from errors import NotFound
from models import Role, UserCreate, UserUpdate
from responses import envelope, serialize_user
from scheduling import is_user_available

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user_or_404(db, user_id: str) -> dict:
    user = db.users.get(user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.get("")
async def get_users(
    role: Optional[Role] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    items = [serialize_user(u) for u in list_users(db, role, is_active, search)]
    return envelope(items, "Users retrieved successfully")


@router.get("/{user_id}")
async def get_user(user_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(serialize_user(_get_user_or_404(db, user_id)), "User retrieved successfully")


@router.get("/{user_id}/availability")
async def get_user_availability(
    user_id: str,
    on: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    _get_user_or_404(db, user_id)
    return envelope(is_user_available(db, user_id, on))


@router.post("", status_code=201)
async def post_user(payload: UserCreate, staff=Depends(get_staff_user), db=Depends(get_db)):
    created, generated_password = create_user(db, staff, payload.model_dump())
    data = serialize_user(created)
    if generated_password:
        # shown once, never stored in clear
        data["temporary_password"] = generated_password
    return envelope(data, "User created successfully")


@router.put("/{user_id}")
async def put_user(
    user_id: str,
    payload: UserUpdate,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    updated = update_user(db, user, user_id, payload.model_dump(exclude_unset=True))
    return envelope(serialize_user(updated), "User updated successfully")


@router.delete("/{user_id}")
async def remove_user(user_id: str, staff=Depends(get_staff_user), db=Depends(get_db)):
    delete_user(db, staff, user_id)
    return envelope(None, "User deleted successfully")
