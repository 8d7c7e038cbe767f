"""Assignment Endpoints"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.access import Principal
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentStats,
    AssignmentUpdate,
)
from app.schemas.responses import SuccessResponse
from app.services.assignment_service import AssignmentService
from app.services.completion_service import CompletionService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[AssignmentResponse]])
async def list_assignments(
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    """Assignments the caller can see, newest first"""
    assignments = await AssignmentService.list_assignments(db, principal)
    return SuccessResponse(data=[AssignmentResponse.model_validate(a) for a in assignments])


@router.post("", response_model=SuccessResponse[AssignmentResponse], status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_in: AssignmentCreate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    """
    Create an assignment. An empty ``group_ids`` makes it global, which
    only board admins may do.
    """
    assignment = await AssignmentService.create_assignment(db, principal, assignment_in)
    return SuccessResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment created successfully"
    )


@router.patch("/{assignment_id}", response_model=SuccessResponse[AssignmentResponse])
async def update_assignment(
    assignment_id: UUID,
    assignment_in: AssignmentUpdate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    assignment = await AssignmentService.update_assignment(db, principal, assignment_id, assignment_in)
    return SuccessResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment updated successfully"
    )


@router.delete("/{assignment_id}", response_model=SuccessResponse[dict])
async def delete_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    await AssignmentService.delete_assignment(db, principal, assignment_id)
    return SuccessResponse(data={"id": str(assignment_id)}, message="Assignment deleted successfully")


@router.get("/{assignment_id}/stats", response_model=SuccessResponse[AssignmentStats])
async def get_assignment_stats(
    assignment_id: UUID,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    """Completion rate and per-user status across the assignment's audience"""
    stats = await CompletionService.get_stats(db, assignment_id, principal)
    return SuccessResponse(data=stats)
