from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core import security
from app.core.limiter import limiter
from app.config import settings
from app.models.user import User
from app.services.user_service import UserService
from app.schemas.auth import LoginRequest, Token
from app.schemas.directory import UserResponse
from app.schemas.responses import SuccessResponse

router = APIRouter()


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Email login. First-time institutional emails are registered as
    DEVELOPER; an existing account keeps its role.
    """
    user = await UserService.login_or_register(db, login_data.email)
    access_token = security.create_access_token(data={"sub": str(user.id), "role": user.role.value})

    return SuccessResponse(
        data=Token(access_token=access_token, user=UserResponse.model_validate(user)),
        message="Login successful"
    )


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    """Get the authenticated user with their group memberships"""
    return SuccessResponse(data=UserResponse.model_validate(current_user))
