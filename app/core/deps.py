"""
FastAPI dependencies for authentication and tenant scoping.

These dependencies are used to protect endpoints and extract user context.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import AuthenticationError, AuthorizationError
from app.core.security import decode_token
from app.models.user import User

# HTTP Bearer token scheme (Authorization: Bearer <token>)
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate the current user from JWT token.

    This dependency:
    1. Extracts the Bearer token from Authorization header
    2. Decodes and validates the JWT
    3. Fetches the user from the database
    4. Ensures the user is active

    Raises:
        AuthenticationError (401): If token is missing/invalid or user not found
        AuthorizationError (403): If the user account is inactive
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise AuthenticationError()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError()

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    return user


def ensure_same_company(user: User, company_id: Optional[UUID]) -> UUID:
    """
    Resolve an optional client-supplied companyId against the caller's tenant.

    Raises:
        AuthorizationError: If the client names another company
    """
    if company_id is not None and company_id != user.company_id:
        raise AuthorizationError("Cross-tenant access is not allowed")
    return user.company_id


def ensure_same_user(user: User, user_id: Optional[UUID]) -> UUID:
    """
    Resolve an optional client-supplied userId against the caller.

    Raises:
        AuthorizationError: If the client acts on behalf of someone else
    """
    if user_id is not None and user_id != user.id:
        raise AuthorizationError("Cannot act on behalf of another user")
    return user.id
