import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from bookswap.core import security
from bookswap.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from bookswap.models.models import User

logger = logging.getLogger("bookswap.auth")

INVALID_CREDENTIALS = "Invalid credentials"


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _session_payload(user: User) -> Dict[str, Any]:
    return {
        "token": security.create_access_token(user.id, user.email),
        "user": {"id": user.id, "name": user.name, "email": user.email},
    }


def register(db: Session, name: Optional[str], department: Optional[str], register_number: Optional[str],
             year_of_study: Optional[int], email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
    name, department, register_number, email = (
        _clean(name), _clean(department), _clean(register_number), _clean(email))
    if not all([name, department, register_number, email, password]) or year_of_study is None:
        raise ValidationError("All fields are required")

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email exists")
    if db.query(User).filter(User.register_number == register_number).first():
        raise ConflictError("Register number exists")

    user = User(
        name=name,
        department=department,
        register_number=register_number,
        year_of_study=year_of_study,
        email=email,
        password_hash=security.hash_password(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user id={user.id} email={user.email}")
    return _session_payload(user)


def login(db: Session, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
    """Issue a token for matching credentials.

    An unknown email and a wrong password fail identically so the response
    does not reveal which check failed.
    """
    email = _clean(email)
    if not email or not password:
        raise AuthError(INVALID_CREDENTIALS)
    user = db.query(User).filter(User.email == email).first()
    if not user or not security.verify_password(password, user.password_hash):
        logger.info(f"Failed login for email={email}")
        raise AuthError(INVALID_CREDENTIALS)
    return _session_payload(user)


def me(db: Session, identity: Dict[str, Any]) -> User:
    user = db.query(User).filter(User.id == identity["id"]).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def logout() -> Dict[str, str]:
    # tokens are stateless; the client discards its copy
    return {"message": "Logged out successfully"}
