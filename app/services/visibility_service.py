"""Visibility Service - which assignments a principal may see

Rules, in order:

1. Alumni or archived principals see nothing.
2. Board admins see everything.
3. Everyone else sees global assignments plus those targeting at least
   one of their groups.
4. Non-trainees additionally lose any assignment that targets a cohort
   group (bootcamp homework), including mixed cohort/non-cohort targets.
   Global assignments are never suppressed.
"""

from typing import AbstractSet, Callable, Iterable, List, TypeVar
from uuid import UUID
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.access import AssignmentScope, GlobalScope, Principal, scope_of
from app.models.assignment import Assignment
from app.models.group import Group
from app.services.membership_service import MembershipService

T = TypeVar("T")


def is_candidate(principal: Principal, my_group_ids: AbstractSet[UUID], scope: AssignmentScope) -> bool:
    """Group/global check before cohort suppression"""
    if isinstance(scope, GlobalScope):
        return True
    return any(gid in my_group_ids for gid in scope.group_ids)


def is_suppressed(principal: Principal, scope: AssignmentScope) -> bool:
    if principal.is_trainee or isinstance(scope, GlobalScope):
        return False
    return scope.touches_cohort


def is_visible(principal: Principal, my_group_ids: AbstractSet[UUID], scope: AssignmentScope) -> bool:
    if principal.is_blacked_out:
        return False
    if principal.is_admin:
        return True
    return is_candidate(principal, my_group_ids, scope) and not is_suppressed(principal, scope)


def filter_visible(
    principal: Principal,
    my_group_ids: AbstractSet[UUID],
    items: Iterable[T],
    scope_fn: Callable[[T], AssignmentScope] = scope_of,
) -> List[T]:
    """Keep the items visible to ``principal``, preserving order"""
    if principal.is_blacked_out:
        return []
    return [item for item in items if is_visible(principal, my_group_ids, scope_fn(item))]


class VisibilityService:
    """Store-backed wrappers around the pure rules above"""

    @staticmethod
    async def list_visible_assignments(db: AsyncSession, principal: Principal) -> List[Assignment]:
        if principal.is_blacked_out:
            return []

        query = (
            select(Assignment)
            .options(selectinload(Assignment.groups))
            .order_by(Assignment.created_at.desc())
        )
        if principal.is_admin:
            result = await db.execute(query)
            return list(result.scalars().all())

        my_group_ids = await MembershipService.resolve_group_ids(db, principal.id)
        # Narrow in SQL to visibility candidates; suppression runs in Python
        candidates = [~Assignment.groups.any()]
        if my_group_ids:
            candidates.append(Assignment.groups.any(Group.id.in_(list(my_group_ids))))
        result = await db.execute(query.where(or_(*candidates)))
        return filter_visible(principal, my_group_ids, result.scalars().all())

    @staticmethod
    async def is_assignment_visible(db: AsyncSession, principal: Principal, assignment: Assignment) -> bool:
        """``assignment.groups`` must already be loaded"""
        if principal.is_blacked_out:
            return False
        if principal.is_admin:
            return True
        my_group_ids = await MembershipService.resolve_group_ids(db, principal.id)
        return is_visible(principal, my_group_ids, scope_of(assignment))
