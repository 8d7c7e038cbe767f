"""User Management Endpoints"""

from typing import Any
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import math

from app.database import get_db
from app.api.deps import require_admin
from app.core.access import Principal
from app.schemas.directory import UserBulkCreate, UserBulkDelete, UserCreate, UserResponse, UserUpdate
from app.schemas.responses import BulkResult, PaginatedResponse, SuccessResponse
from app.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> PaginatedResponse[UserResponse]:
    """
    Get paginated list of users with their group memberships.
    """
    users, total = await UserService.list_users(db, principal, page=page, page_size=page_size)
    return PaginatedResponse(
        data=[UserResponse.model_validate(u) for u in users],
        meta={
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": math.ceil(total / page_size)
        }
    )


@router.post("", response_model=SuccessResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> Any:
    user = await UserService.create_user(db, principal, user_in)
    return SuccessResponse(data=UserResponse.model_validate(user), message="User created successfully")


@router.post("/bulk", response_model=SuccessResponse[BulkResult])
async def bulk_create_users(
    payload: UserBulkCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> Any:
    """Create many users; each row succeeds or fails on its own"""
    report = await UserService.bulk_create_users(db, principal, payload.users)
    return SuccessResponse(data=report, message=f"{report.succeeded} created, {report.failed} failed")


@router.post("/bulk-delete", response_model=SuccessResponse[BulkResult])
async def bulk_delete_users(
    payload: UserBulkDelete,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> Any:
    """Your own id is skipped silently"""
    report = await UserService.bulk_delete_users(db, principal, payload.ids)
    return SuccessResponse(data=report, message=f"{report.succeeded} deleted, {report.failed} failed")


@router.patch("/{user_id}", response_model=SuccessResponse[UserResponse])
async def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> Any:
    """
    Update a user. Sending ``group_ids`` replaces their memberships in
    the same transaction.
    """
    user = await UserService.update_user(db, principal, user_id, user_in)
    return SuccessResponse(data=UserResponse.model_validate(user), message="User updated successfully")


@router.delete("/{user_id}", response_model=SuccessResponse[dict])
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
) -> Any:
    await UserService.delete_user(db, principal, user_id)
    return SuccessResponse(data={"id": str(user_id)}, message="User deleted successfully")
