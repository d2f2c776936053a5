from fastapi import APIRouter, Depends

from accounts import change_password
from auth import authenticate, issue_token, refresh
from database import get_db
from deps import get_current_user, get_token
from models import LoginIn, PasswordChangeIn
from permissions import capabilities
from responses import envelope, serialize_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginIn, db=Depends(get_db)):
    user = authenticate(db, body.username, body.password)
    token = issue_token(user)
    return envelope(
        {"access_token": token, "token_type": "bearer", "user": serialize_user(user)},
        "Login successful",
    )


@router.post("/logout")
async def logout(user=Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy.
    return envelope(None, "Logout successful")


@router.get("/me")
async def me(user=Depends(get_current_user)):
    """
    Return the current authenticated user.
    Front end probes this on load to restore the session.
    """
    return envelope(serialize_user(user), "User retrieved successfully")


@router.post("/refresh")
async def refresh_token(token: str = Depends(get_token), db=Depends(get_db)):
    return envelope(
        {"access_token": refresh(db, token), "token_type": "bearer"},
        "Token refreshed successfully",
    )


@router.get("/permissions")
async def my_permissions(user=Depends(get_current_user)):
    return envelope({"role": user["role"], "permissions": capabilities(user)})


@router.put("/password")
async def update_password(
    payload: PasswordChangeIn,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    """
    Change the current user's password.

    Rules:
    - current_password is required and must be correct.
    - A successful change clears must_reset_password (temporary accounts).
    """
    updated = change_password(db, user, payload.current_password, payload.new_password)
    return envelope(serialize_user(updated), "Password updated successfully")
