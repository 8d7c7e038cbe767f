"""API Dependencies"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.core.access import Principal
from app.core.exceptions import AuthenticationRequiredError
from app.core.security import decode_token
from app.database import get_db
from app.models.user import User
from app.services.authorization_service import require_admin as admin_rule
from app.services.user_service import UserService

# Missing credentials are reported through AuthenticationRequiredError, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Get current authenticated user from JWT token.

    Alumni and archived users still authenticate; visibility hides
    everything from them further down.

    Raises:
        AuthenticationRequiredError: token missing, invalid, or user gone
    """
    if credentials is None:
        raise AuthenticationRequiredError("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise AuthenticationRequiredError("Could not validate credentials")

    user_id_str: Optional[str] = payload.get("sub")
    try:
        user_id = UUID(user_id_str)
    except (TypeError, ValueError):
        raise AuthenticationRequiredError("Could not validate credentials")

    user = await UserService.get_user_by_id(db, user_id)
    if not user:
        raise AuthenticationRequiredError("User no longer exists")
    request.state.principal_id = str(user.id)
    return user


async def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    return Principal.from_user(current_user)


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Gate for directory-management routes"""
    admin_rule(principal, "manage the directory").ensure()
    return principal
