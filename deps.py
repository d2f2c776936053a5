from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from auth import resolve_token
from database import get_db
from errors import Unauthenticated
from permissions import Action, require

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_token(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    if not token:
        raise Unauthenticated("Access token required")
    return token


async def get_current_user(token: str = Depends(get_token), db=Depends(get_db)):
    return resolve_token(db, token)


def RequireAction(action: Action):
    async def dep(user=Depends(get_current_user)):
        return require(user, action)
    return dep


# admin + manager
get_staff_user = RequireAction(Action.MANAGE_SHIFTS)
