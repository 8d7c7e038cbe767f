"""Authorization Service - who may create, change, delete or inspect what

Role tiers: BOARD_ADMIN > {TECH_LEAD, PRODUCT_MANAGER} > DEVELOPER.
Non-admins "manage" exactly the groups they are members of. Every check
returns a ``Decision`` whose reason names the rule that failed.
"""

from typing import AbstractSet, Collection, FrozenSet, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access import AssignmentScope, Decision, GlobalScope, Principal, is_subset
from app.core.logging import get_logger
from app.models.enums import UserRole
from app.services.membership_service import MembershipService

logger = get_logger(__name__)

REASON_MANAGED_GROUPS_ONLY = "You can only assign to groups you manage"
REASON_GROUP_REQUIRED = "Select at least one group; only admins can create global assignments"
REASON_DELETE_GLOBAL = "Only admins can delete global assignments"
REASON_DELETE_FOREIGN = (
    "You cannot delete this assignment as it is assigned to groups you do not manage"
)
REASON_STATS_GLOBAL = "You do not have permission to view stats for global assignments."
REASON_STATS_FOREIGN = "You do not have permission to view stats for this assignment."
REASON_ADMIN_ONLY = "Only admins can {action}"


def _check_targets(
    my_group_ids: AbstractSet[UUID],
    target_group_ids: Collection[UUID],
    require_groups: bool,
) -> Decision:
    if require_groups and not target_group_ids:
        return Decision.deny(REASON_GROUP_REQUIRED)
    if not is_subset(set(target_group_ids), my_group_ids):
        return Decision.deny(REASON_MANAGED_GROUPS_ONLY)
    return Decision.allow()


def can_create_assignment(
    principal: Principal,
    my_group_ids: AbstractSet[UUID],
    target_group_ids: Collection[UUID],
    require_groups: Optional[bool] = None,
) -> Decision:
    if principal.role == UserRole.DEVELOPER:
        return Decision.deny("Developers cannot create assignments")
    if principal.is_admin:
        return Decision.allow()
    if require_groups is None:
        require_groups = settings.REQUIRE_GROUPS_FOR_NON_ADMIN
    return _check_targets(my_group_ids, target_group_ids, require_groups)


def can_modify_assignment(
    principal: Principal,
    my_group_ids: AbstractSet[UUID],
    scope: AssignmentScope,
    new_group_ids: Optional[Collection[UUID]] = None,
    require_groups: Optional[bool] = None,
) -> Decision:
    """
    Scalar edits only need a non-developer role; retargeting
    (``new_group_ids`` given) must pass the same rule as creation.

    ``scope`` is not consulted: a tech lead or product manager may retitle
    a global assignment or one aimed at groups they do not manage. Only a
    change of target groups is checked against the groups they manage.
    """
    if principal.role == UserRole.DEVELOPER:
        return Decision.deny("Developers cannot update assignments")
    if principal.is_admin or new_group_ids is None:
        return Decision.allow()
    if require_groups is None:
        require_groups = settings.REQUIRE_GROUPS_FOR_NON_ADMIN
    return _check_targets(my_group_ids, new_group_ids, require_groups)


def can_delete_assignment(
    principal: Principal,
    my_group_ids: AbstractSet[UUID],
    scope: AssignmentScope,
) -> Decision:
    if principal.role == UserRole.DEVELOPER:
        return Decision.deny("Developers cannot delete assignments")
    if principal.is_admin:
        return Decision.allow()
    if isinstance(scope, GlobalScope):
        return Decision.deny(REASON_DELETE_GLOBAL)
    if not is_subset(scope.group_ids, my_group_ids):
        return Decision.deny(REASON_DELETE_FOREIGN)
    return Decision.allow()


def can_view_stats(
    principal: Principal,
    my_group_ids: AbstractSet[UUID],
    scope: AssignmentScope,
) -> Decision:
    if principal.is_admin:
        return Decision.allow()
    if isinstance(scope, GlobalScope):
        return Decision.deny(REASON_STATS_GLOBAL)
    if not any(gid in my_group_ids for gid in scope.group_ids):
        return Decision.deny(REASON_STATS_FOREIGN)
    return Decision.allow()


def require_admin(principal: Principal, action: str) -> Decision:
    """Directory management (users, groups, cohorts) is admin-only"""
    if principal.is_admin:
        return Decision.allow()
    return Decision.deny(REASON_ADMIN_ONLY.format(action=action))


class AuthorizationService:
    """Resolves the principal's groups, then applies the pure checks"""

    @staticmethod
    async def managed_group_ids(db: AsyncSession, principal: Principal) -> FrozenSet[UUID]:
        # Admins and developers never need their groups for these checks
        if principal.is_admin or principal.role == UserRole.DEVELOPER:
            return frozenset()
        return frozenset(await MembershipService.resolve_group_ids(db, principal.id))

    @staticmethod
    async def ensure_can_create(
        db: AsyncSession, principal: Principal, target_group_ids: Collection[UUID]
    ) -> None:
        my_group_ids = await AuthorizationService.managed_group_ids(db, principal)
        AuthorizationService._ensure(
            can_create_assignment(principal, my_group_ids, target_group_ids), principal, "create"
        )

    @staticmethod
    async def ensure_can_modify(
        db: AsyncSession,
        principal: Principal,
        scope: AssignmentScope,
        new_group_ids: Optional[Collection[UUID]] = None,
    ) -> None:
        my_group_ids = await AuthorizationService.managed_group_ids(db, principal)
        AuthorizationService._ensure(
            can_modify_assignment(principal, my_group_ids, scope, new_group_ids), principal, "update"
        )

    @staticmethod
    async def ensure_can_delete(db: AsyncSession, principal: Principal, scope: AssignmentScope) -> None:
        my_group_ids = await AuthorizationService.managed_group_ids(db, principal)
        AuthorizationService._ensure(
            can_delete_assignment(principal, my_group_ids, scope), principal, "delete"
        )

    @staticmethod
    async def ensure_can_view_stats(db: AsyncSession, principal: Principal, scope: AssignmentScope) -> None:
        if principal.is_admin:
            return
        # Developers may read stats for groups they belong to
        my_group_ids = frozenset(await MembershipService.resolve_group_ids(db, principal.id))
        AuthorizationService._ensure(
            can_view_stats(principal, my_group_ids, scope), principal, "view_stats"
        )

    @staticmethod
    def _ensure(decision: Decision, principal: Principal, action: str) -> None:
        if not decision:
            logger.debug(
                "Permission denied",
                extra={"principal_id": principal.id, "action": action, "reason": decision.reason},
            )
        decision.ensure()
