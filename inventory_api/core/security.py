from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Response
from passlib.context import CryptContext

from inventory_api.config import Settings
from inventory_api.core.exceptions import AuthenticationError

BCRYPT_ROUNDS = 10
ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, settings: Settings) -> str:
    """Sign a session token for ``user_id`` that expires after the configured window."""
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "iat": now,
        "exp": now + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: Optional[str], settings: Settings) -> str:
    """
    Return the user id bound to ``token``.

    Raises AuthenticationError when the token is absent, malformed, expired or
    signed with another key.
    """
    if not token:
        raise AuthenticationError("Not authenticated")
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "user_id"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid session token")

    user_id = payload.get("user_id")
    if not isinstance(user_id, str) or not user_id:
        raise AuthenticationError("Invalid session token")
    return user_id


def _cookie_max_age(settings: Settings) -> int:
    return settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=_cookie_max_age(settings),
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
