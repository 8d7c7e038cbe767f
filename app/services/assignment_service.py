"""Assignment Service - create, update and delete assignments and their targets"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.access import Principal, scope_of
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.database import atomic
from app.models.assignment import Assignment, assignment_groups
from app.models.completion import Completion
from app.schemas.assignment import AssignmentCreate, AssignmentUpdate
from app.services.authorization_service import AuthorizationService
from app.services.group_service import GroupService
from app.services.visibility_service import VisibilityService
from app.utils.reconcile import diff_ids

logger = get_logger(__name__)

# Columns that may not be cleared by a partial update
_REQUIRED_FIELDS = ("title", "type", "content_url")


class AssignmentService:
    @staticmethod
    async def get_assignment(db: AsyncSession, assignment_id: UUID) -> Optional[Assignment]:
        result = await db.execute(
            select(Assignment)
            .options(selectinload(Assignment.groups))
            .where(Assignment.id == assignment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_assignment_or_404(db: AsyncSession, assignment_id: UUID) -> Assignment:
        assignment = await AssignmentService.get_assignment(db, assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")
        return assignment

    @staticmethod
    async def list_assignments(db: AsyncSession, principal: Principal) -> List[Assignment]:
        """Assignments visible to the principal, newest first"""
        return await VisibilityService.list_visible_assignments(db, principal)

    @staticmethod
    async def create_assignment(
        db: AsyncSession,
        principal: Principal,
        data: AssignmentCreate,
    ) -> Assignment:
        group_ids = list(dict.fromkeys(data.group_ids))
        await AuthorizationService.ensure_can_create(db, principal, group_ids)
        await GroupService.ensure_groups_exist(db, group_ids)

        async with atomic(db):
            assignment = Assignment(
                title=data.title,
                description=data.description,
                type=data.type,
                content_url=data.content_url,
                thumbnail_url=data.thumbnail_url,
                due_date=data.due_date,
            )
            db.add(assignment)
            await db.flush()

            if group_ids:
                await db.execute(
                    insert(assignment_groups),
                    [{"assignment_id": assignment.id, "group_id": gid} for gid in group_ids],
                )

        logger.info(
            "Assignment created",
            extra={
                "principal_id": principal.id,
                "assignment_id": str(assignment.id),
                "group_ids": [str(g) for g in group_ids],
            },
        )
        # Fetch with eager load so the response can read the groups
        return await AssignmentService.get_assignment_or_404(db, assignment.id)

    @staticmethod
    async def update_assignment(
        db: AsyncSession,
        principal: Principal,
        assignment_id: UUID,
        data: AssignmentUpdate,
    ) -> Assignment:
        """
        Apply scalar changes and, when ``group_ids`` is supplied, diff the
        target groups. Both land in one transaction.
        """
        assignment = await AssignmentService.get_assignment_or_404(db, assignment_id)

        update_data = data.model_dump(exclude_unset=True)
        new_group_ids = update_data.pop("group_ids", None)
        if new_group_ids is not None:
            new_group_ids = list(dict.fromkeys(new_group_ids))

        for field in _REQUIRED_FIELDS:
            if field in update_data and update_data[field] is None:
                raise ValidationError(f"{field} cannot be cleared")

        await AuthorizationService.ensure_can_modify(db, principal, scope_of(assignment), new_group_ids)
        if new_group_ids:
            await GroupService.ensure_groups_exist(db, new_group_ids)

        async with atomic(db):
            for field, value in update_data.items():
                setattr(assignment, field, value)

            if new_group_ids is not None:
                current = [g.id for g in assignment.groups]
                to_add, to_remove = diff_ids(current, new_group_ids)
                if to_remove:
                    await db.execute(
                        delete(assignment_groups).where(
                            assignment_groups.c.assignment_id == assignment_id,
                            assignment_groups.c.group_id.in_(to_remove),
                        )
                    )
                if to_add:
                    await db.execute(
                        insert(assignment_groups),
                        [{"assignment_id": assignment_id, "group_id": gid} for gid in to_add],
                    )
                logger.info(
                    "Assignment retargeted",
                    extra={
                        "assignment_id": str(assignment_id),
                        "added": [str(g) for g in to_add],
                        "removed": [str(g) for g in to_remove],
                    },
                )

        logger.info(
            "Assignment updated",
            extra={"principal_id": principal.id, "assignment_id": str(assignment_id), "fields": sorted(update_data)},
        )
        return await AssignmentService.get_assignment_or_404(db, assignment_id)

    @staticmethod
    async def delete_assignment(db: AsyncSession, principal: Principal, assignment_id: UUID) -> None:
        assignment = await AssignmentService.get_assignment_or_404(db, assignment_id)
        await AuthorizationService.ensure_can_delete(db, principal, scope_of(assignment))

        async with atomic(db):
            # Explicit cleanup so no link or completion can outlive the row
            await db.execute(
                delete(assignment_groups).where(assignment_groups.c.assignment_id == assignment_id)
            )
            await db.execute(delete(Completion).where(Completion.assignment_id == assignment_id))
            await db.execute(delete(Assignment).where(Assignment.id == assignment_id))

        logger.info(
            "Assignment deleted",
            extra={"principal_id": principal.id, "assignment_id": str(assignment_id)},
        )
