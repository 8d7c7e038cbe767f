"""Cohort Service - training programs and their group cascade"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import Principal
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.database import atomic
from app.models.cohort import Cohort
from app.models.enums import GroupStatus
from app.models.group import Group
from app.schemas.directory import CohortCreate, CohortUpdate
from app.services.authorization_service import require_admin

logger = get_logger(__name__)


def group_status_for(is_active: bool) -> GroupStatus:
    """Status every owned group takes when the cohort is toggled"""
    return GroupStatus.ACTIVE if is_active else GroupStatus.ARCHIVED


class CohortService:
    @staticmethod
    async def list_cohorts(db: AsyncSession) -> List[Cohort]:
        """All cohorts, active and archived; clients filter"""
        result = await db.execute(select(Cohort).order_by(Cohort.name.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_cohort(db: AsyncSession, cohort_id: UUID) -> Optional[Cohort]:
        result = await db.execute(select(Cohort).where(Cohort.id == cohort_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_cohort_or_404(db: AsyncSession, cohort_id: UUID) -> Cohort:
        cohort = await CohortService.get_cohort(db, cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        return cohort

    @staticmethod
    async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Cohort.id).where(Cohort.name == name)
        if exclude_id is not None:
            query = query.where(Cohort.id != exclude_id)
        result = await db.execute(query)
        if result.first():
            raise ConflictError(f"Cohort '{name}' already exists")

    @staticmethod
    async def create_cohort(db: AsyncSession, principal: Principal, data: CohortCreate) -> Cohort:
        require_admin(principal, "create cohorts").ensure()
        await CohortService._ensure_name_free(db, data.name)

        async with atomic(db):
            cohort = Cohort(
                name=data.name,
                start_date=data.start_date,
                end_date=data.end_date,
                is_active=data.is_active,
            )
            db.add(cohort)

        logger.info("Cohort created", extra={"principal_id": principal.id, "cohort_id": str(cohort.id)})
        return cohort

    @staticmethod
    async def update_cohort(
        db: AsyncSession,
        principal: Principal,
        cohort_id: UUID,
        data: CohortUpdate,
    ) -> Cohort:
        """
        Update a cohort. Setting ``is_active`` force-sets every owned
        group to ACTIVE/ARCHIVED in the same transaction, overriding any
        per-group status.
        """
        require_admin(principal, "update cohorts").ensure()
        cohort = await CohortService.get_cohort_or_404(db, cohort_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name") and update_data["name"] != cohort.name:
            await CohortService._ensure_name_free(db, update_data["name"], exclude_id=cohort_id)

        start = update_data.get("start_date", cohort.start_date)
        end = update_data.get("end_date", cohort.end_date)
        if start and end and end < start:
            raise ValidationError("end_date must not be before start_date")

        cascaded = 0
        async with atomic(db):
            for field, value in update_data.items():
                if value is None and field in ("name", "is_active"):
                    continue
                setattr(cohort, field, value)

            if update_data.get("is_active") is not None:
                result = await db.execute(
                    update(Group)
                    .where(Group.cohort_id == cohort_id)
                    .values(status=group_status_for(update_data["is_active"]))
                    .execution_options(synchronize_session=False)
                )
                cascaded = result.rowcount or 0

        logger.info(
            "Cohort updated",
            extra={"principal_id": principal.id, "cohort_id": str(cohort_id), "groups_cascaded": cascaded},
        )
        return cohort

    @staticmethod
    async def delete_cohort(db: AsyncSession, principal: Principal, cohort_id: UUID) -> None:
        """Refuses while any group still references the cohort"""
        require_admin(principal, "delete cohorts").ensure()
        cohort = await CohortService.get_cohort_or_404(db, cohort_id)

        group_count = await db.scalar(
            select(func.count()).select_from(Group).where(Group.cohort_id == cohort_id)
        )
        if group_count:
            raise ConflictError(
                f"Cannot delete cohort '{cohort.name}' because it has {group_count} groups assigned. "
                "Please reassign or delete these groups first."
            )

        async with atomic(db):
            await db.execute(delete(Cohort).where(Cohort.id == cohort_id))

        logger.info("Cohort deleted", extra={"principal_id": principal.id, "cohort_id": str(cohort_id)})
