"""Completion Service - per-user completion toggles and assignment stats"""

from typing import List, Sequence
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import GlobalScope, Principal, scope_of
from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.database import atomic
from app.models.assignment import Assignment
from app.utils.time import utc_now
from app.models.completion import Completion
from app.models.enums import CompletionState
from app.models.group import user_groups
from app.models.user import User
from app.schemas.assignment import AssigneeStatus, AssignmentStats, CompletionResponse
from app.services.assignment_service import AssignmentService
from app.services.authorization_service import AuthorizationService

logger = get_logger(__name__)


def build_stats(
    assignment: Assignment,
    audience: Sequence[User],
    completions: Sequence[Completion],
) -> AssignmentStats:
    """
    Combine the target audience with the completion rows.

    ``total_completed`` counts every completion row of the assignment;
    the rate is 0 for an empty audience.
    """
    by_user = {c.user_id: c for c in completions}
    details = []
    for user in audience:
        completion = by_user.get(user.id)
        details.append(
            AssigneeStatus(
                user_id=user.id,
                email=user.email,
                full_name=user.display_name,
                status=CompletionState.COMPLETED if completion else CompletionState.PENDING,
                completed_at=completion.completed_at if completion else None,
            )
        )

    total_assigned = len(audience)
    total_completed = len(completions)
    rate = (total_completed / total_assigned) * 100 if total_assigned > 0 else 0.0
    return AssignmentStats(
        assignment_id=assignment.id,
        assignment_title=assignment.title,
        total_assigned=total_assigned,
        total_completed=total_completed,
        completion_rate=rate,
        details=details,
    )


class CompletionService:
    @staticmethod
    async def get_completion(db: AsyncSession, user_id: UUID, assignment_id: UUID):
        result = await db.execute(
            select(Completion).where(
                Completion.user_id == user_id,
                Completion.assignment_id == assignment_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def toggle(db: AsyncSession, user_id: UUID, assignment_id: UUID) -> bool:
        """
        Flip the completion mark. Returns True when the assignment is now
        completed, False when the mark was removed.
        """
        await AssignmentService.get_assignment_or_404(db, assignment_id)

        existing = await CompletionService.get_completion(db, user_id, assignment_id)
        if existing:
            async with atomic(db):
                await db.delete(existing)
            logger.info(
                "Completion cleared",
                extra={"principal_id": user_id, "assignment_id": str(assignment_id)},
            )
            return False

        try:
            async with atomic(db):
                db.add(Completion(user_id=user_id, assignment_id=assignment_id, completed_at=utc_now()))
        except ConflictError:
            # Lost a race with a concurrent toggle that created the same row
            return True
        logger.info(
            "Completion recorded",
            extra={"principal_id": user_id, "assignment_id": str(assignment_id)},
        )
        return True

    @staticmethod
    async def list_for_user(db: AsyncSession, principal: Principal) -> List[CompletionResponse]:
        result = await db.execute(
            select(Completion)
            .where(Completion.user_id == principal.id)
            .order_by(Completion.completed_at.desc())
        )
        return [
            CompletionResponse(
                id=c.id,
                assignment_id=c.assignment_id,
                user_email=principal.email,
                completed_at=c.completed_at,
            )
            for c in result.scalars().all()
        ]

    @staticmethod
    async def resolve_audience(db: AsyncSession, assignment: Assignment) -> List[User]:
        """All users for a global assignment, else the deduplicated members of its groups"""
        scope = scope_of(assignment)
        query = select(User).order_by(User.email)
        if not isinstance(scope, GlobalScope):
            member_ids = (
                select(user_groups.c.user_id)
                .where(user_groups.c.group_id.in_(list(scope.group_ids)))
            )
            query = query.where(User.id.in_(member_ids))
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_stats(db: AsyncSession, assignment_id: UUID, principal: Principal) -> AssignmentStats:
        assignment = await AssignmentService.get_assignment_or_404(db, assignment_id)
        await AuthorizationService.ensure_can_view_stats(db, principal, scope_of(assignment))

        audience = await CompletionService.resolve_audience(db, assignment)
        result = await db.execute(select(Completion).where(Completion.assignment_id == assignment_id))
        completions = list(result.scalars().all())
        return build_stats(assignment, audience, completions)
