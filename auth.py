import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from config import settings
from errors import InvalidCredentials, TokenExpiredOrInvalid, Unauthenticated, UserNotFound

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict, expires_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode.update({"iat": now, "exp": now + timedelta(minutes=expires_minutes)})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def authenticate(db, username: str, password: str) -> dict:
    """
    Check a username/password pair and stamp ``last_login_at``.

    Unknown usernames, wrong passwords and deactivated accounts all fail the
    same way so the response does not reveal which one it was.
    """
    user = db.users.find_one({"username": username})
    if not user or not verify_password(password, user.get("password_hash")):
        logger.info("Failed login attempt for %r", username)
        raise InvalidCredentials()
    if not user.get("is_active", True):
        logger.info("Login refused for inactive user %s", user["id"])
        raise InvalidCredentials()

    user = db.users.update_one(user["id"], {"last_login_at": datetime.now(timezone.utc)})
    logger.info("User %s logged in", user["id"])
    return user


def issue_token(user: dict, expires_minutes: int | None = None) -> str:
    return create_access_token(
        {"sub": user["id"], "username": user["username"], "role": user["role"]},
        expires_minutes,
    )


def resolve_token(db, token: str) -> dict:
    payload = decode_token(token)
    if not payload or "sub" not in payload:
        raise TokenExpiredOrInvalid()
    user = db.users.get(payload["sub"])
    if not user:
        # token outlived the account
        raise UserNotFound()
    if not user.get("is_active", True):
        # deactivation revokes tokens issued before it
        raise Unauthenticated("User account is deactivated")
    return user


def refresh(db, token: str) -> str:
    """Issue a fresh token for the same user. The old token stays valid until it expires."""
    return issue_token(resolve_token(db, token))
