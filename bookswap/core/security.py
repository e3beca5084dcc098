"""Password hashing and bearer tokens.

Passwords are salted and hashed with werkzeug; tokens are HS256 JWTs
carrying ``{"id", "email"}``.  Nothing is stored server side, so a token
stays valid until it expires whether or not the client logged out.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from werkzeug.security import check_password_hash, generate_password_hash

from bookswap.core.config import settings
from bookswap.core.errors import AuthError

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(user_id: int, email: str) -> str:
    payload: Dict[str, Any] = {"id": user_id, "email": email}
    if settings.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return ``{"id", "email"}`` for a valid token or raise AuthError(403)."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        raise AuthError("Invalid token", status_code=403)
    if "id" not in payload:
        raise AuthError("Invalid token", status_code=403)
    return {"id": payload["id"], "email": payload.get("email")}


def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Route dependency: the caller's identity decoded from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthError("No token provided", status_code=401)
    return decode_access_token(credentials.credentials)
