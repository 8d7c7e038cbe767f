"""Completion Endpoints"""

from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.access import Principal
from app.schemas.assignment import CompletionResponse, CompletionToggle, CompletionToggleResult
from app.schemas.responses import SuccessResponse
from app.services.completion_service import CompletionService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[CompletionResponse]])
async def list_my_completions(
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    completions = await CompletionService.list_for_user(db, principal)
    return SuccessResponse(data=completions)


@router.post("/toggle", response_model=SuccessResponse[CompletionToggleResult])
async def toggle_completion(
    toggle_in: CompletionToggle,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    """Mark the assignment done, or undo the mark if it is already done"""
    completed = await CompletionService.toggle(db, principal.id, toggle_in.assignment_id)
    return SuccessResponse(
        data=CompletionToggleResult(completed=completed),
        message="Marked as completed" if completed else "Completion removed"
    )
