"""
Password hashing, access tokens and the bearer-token dependency.

Tokens are verified without a store lookup: a token issued to a user that
is later removed stays valid until it expires.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext

from errors import AuthError
from settings import ALGORITHM, BCRYPT_ROUNDS, TOKEN_EXPIRE_MINUTES, TOKEN_SECRET

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user_id: Any, email: str, role: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the user's id and email (and role, when set)."""
    now = datetime.now(timezone.utc)
    to_encode: Dict[str, Any] = {"user_id": str(user_id), "email": email}
    if role:
        to_encode["role"] = role
    to_encode.update({
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=TOKEN_EXPIRE_MINUTES)),
    })
    return jwt.encode(to_encode, TOKEN_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return the token claims. Raises JWTError on a bad signature, a malformed token or expiry."""
    return jwt.decode(token, TOKEN_SECRET, algorithms=[ALGORITHM])


def verify_token(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    """
    Dependency guarding protected routes.

    Expects ``Authorization: Bearer <token>``. A missing header, a missing
    token and a token that fails verification all end in the same bare 403.
    """
    if not authorization:
        raise AuthError()
    parts = authorization.split(" ")
    token = parts[1] if len(parts) > 1 else None
    if not token:
        raise AuthError()
    try:
        return decode_access_token(token)
    except JWTError as e:
        logger.warning("Token verification failed: %s", e)
        raise AuthError()
