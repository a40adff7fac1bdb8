# storefront/auth/service.py

from datetime import timedelta, datetime, timezone
from typing import Annotated, Optional
from uuid import uuid4
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import jwt
from jwt import PyJWTError
import logging

from ..core.config import settings
from ..core.exceptions import NotAuthenticatedError, ForbiddenError
from ..database.core import get_db
from ..users.models import User
from .models import TokenData, Caller, Role

logger = logging.getLogger(__name__)

# auto_error=False so a missing header surfaces as UNAUTHENTICATED in our own error format
oauth2_bearer = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def create_access_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Creates a new JWT access token with a unique ID (jti)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    encode = {
        "sub": email,
        "id": str(user_id),
        "exp": expire,
        "scope": "access_token",
        "jti": str(uuid4()),
        "type": "access"
    }
    return jwt.encode(encode, settings.ENCODING_SECRET_KEY, algorithm=settings.ENCODING_ALGORITHM)


def verify_token(token: str) -> TokenData:
    """Decodes and verifies an access token."""
    try:
        payload = jwt.decode(token, settings.ENCODING_SECRET_KEY, algorithms=[settings.ENCODING_ALGORITHM])
    except PyJWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise NotAuthenticatedError(technical_details="Invalid token")

    if payload.get("scope") != "access_token":
        raise NotAuthenticatedError(technical_details="Invalid token scope")

    user_id = payload.get("id")
    if not user_id:
        raise NotAuthenticatedError(technical_details="User ID not found in token")

    return TokenData(user_id=user_id)


def resolve_caller(db: Session, token_data: TokenData) -> Caller:
    """Loads the user behind a verified token and decides the role once."""
    user = db.query(User).filter(User.id == token_data.user_id).first()
    if not user:
        raise NotAuthenticatedError(technical_details=f"User {token_data.user_id} no longer exists")
    return Caller(id=user.id, role=Role.from_stored(user.role), email=user.email)


def get_current_caller(
    token: Annotated[Optional[str], Depends(oauth2_bearer)],
    db: Session = Depends(get_db)
) -> Caller:
    """FastAPI dependency to get the authenticated caller from a bearer token."""
    if not token:
        raise NotAuthenticatedError(technical_details="Missing bearer token")
    return resolve_caller(db, verify_token(token))


def require_admin(caller: Annotated[Caller, Depends(get_current_caller)]) -> Caller:
    if not caller.is_admin:
        logger.warning(f"Caller {caller.id} denied admin-only operation")
        raise ForbiddenError()
    return caller


CurrentCaller = Annotated[Caller, Depends(get_current_caller)]
AdminCaller = Annotated[Caller, Depends(require_admin)]
