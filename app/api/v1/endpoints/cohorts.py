"""Cohort Endpoints"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.access import Principal
from app.schemas.directory import CohortCreate, CohortResponse, CohortUpdate
from app.schemas.responses import SuccessResponse
from app.services.cohort_service import CohortService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[CohortResponse]])
async def list_cohorts(
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
) -> Any:
    cohorts = await CohortService.list_cohorts(db)
    return SuccessResponse(data=[CohortResponse.model_validate(c) for c in cohorts])


@router.post("", response_model=SuccessResponse[CohortResponse], status_code=status.HTTP_201_CREATED)
async def create_cohort(
    cohort_in: CohortCreate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    cohort = await CohortService.create_cohort(db, principal, cohort_in)
    return SuccessResponse(data=CohortResponse.model_validate(cohort), message="Cohort created successfully")


@router.patch("/{cohort_id}", response_model=SuccessResponse[CohortResponse])
async def update_cohort(
    cohort_id: UUID,
    cohort_in: CohortUpdate,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    """Changing ``is_active`` also archives or restores every group of the cohort"""
    cohort = await CohortService.update_cohort(db, principal, cohort_id, cohort_in)
    return SuccessResponse(data=CohortResponse.model_validate(cohort), message="Cohort updated successfully")


@router.delete("/{cohort_id}", response_model=SuccessResponse[dict])
async def delete_cohort(
    cohort_id: UUID,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_admin),
) -> Any:
    await CohortService.delete_cohort(db, principal, cohort_id)
    return SuccessResponse(data={"id": str(cohort_id)}, message="Cohort deleted successfully")
