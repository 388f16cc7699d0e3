import hmac
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from auditionapi.config import settings
from auditionapi.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ServiceUnavailableError,
)
from auditionapi.database.session import get_db
from auditionapi.repositories.user_repository import UserRepository
from auditionapi.schemas.user import UserProfile

logger = logging.getLogger(__name__)

# Bearer scheme; missing headers are reported as our own 401 envelope
security = HTTPBearer(auto_error=False)


def verify_token(token: str) -> str:
    """Validate a Supabase access token and return the user id (``sub``)"""
    if not settings.SUPABASE_JWT_SECRET:
        raise ServiceUnavailableError("Token verification is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")
    return str(user_id)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return verify_token(credentials.credentials)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UserProfile:
    """Authenticated caller with their profile row"""
    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise NotFoundError("User profile not found")
    return user


def require_admin(current_user: UserProfile = Depends(get_current_user)) -> UserProfile:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user


def require_worker(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Shared-secret check for callbacks from the render worker"""
    if not settings.WORKER_AUTH_TOKEN:
        raise ServiceUnavailableError("Worker callbacks are not configured")
    token = credentials.credentials if credentials else ""
    if not hmac.compare_digest(token.encode(), settings.WORKER_AUTH_TOKEN.encode()):
        raise AuthenticationError("Invalid worker token")
