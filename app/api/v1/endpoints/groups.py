"""Group Management Endpoints"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.access import Principal
from app.schemas.directory import GroupBulkDelete, GroupBulkStatus, GroupCreate, GroupResponse, GroupUpdate
from app.schemas.responses import BulkResult, SuccessResponse
from app.services.group_service import GroupService, serialize_group

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[GroupResponse]])
async def list_groups(
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    """Admins get every group; other users get the groups they belong to"""
    groups = await GroupService.list_groups(db, principal)
    return SuccessResponse(data=[serialize_group(g) for g in groups])


@router.post("", response_model=SuccessResponse[GroupResponse], status_code=status.HTTP_201_CREATED)
async def create_group(
    group_in: GroupCreate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    group = await GroupService.create_group(db, principal, group_in)
    return SuccessResponse(data=serialize_group(group), message="Group created successfully")


@router.post("/bulk-delete", response_model=SuccessResponse[BulkResult])
async def bulk_delete_groups(
    payload: GroupBulkDelete,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    report = await GroupService.bulk_delete_groups(db, principal, payload.ids)
    return SuccessResponse(data=report, message=f"{report.succeeded} deleted, {report.failed} failed")


@router.post("/bulk-status", response_model=SuccessResponse[BulkResult])
async def bulk_set_group_status(
    payload: GroupBulkStatus,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    report = await GroupService.bulk_set_status(db, principal, payload.ids, payload.status)
    return SuccessResponse(data=report, message=f"{report.succeeded} updated, {report.failed} failed")


@router.patch("/{group_id}", response_model=SuccessResponse[GroupResponse])
async def update_group(
    group_id: UUID,
    group_in: GroupUpdate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    """Update fields and, when ``member_ids`` is sent, reconcile membership"""
    group = await GroupService.update_group(db, principal, group_id, group_in)
    return SuccessResponse(data=serialize_group(group), message="Group updated successfully")


@router.delete("/{group_id}", response_model=SuccessResponse[dict])
async def delete_group(
    group_id: UUID,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    await GroupService.delete_group(db, principal, group_id)
    return SuccessResponse(data={"id": str(group_id)}, message="Group deleted successfully")
