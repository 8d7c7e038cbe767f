"""Group Service - admin-managed groups and their membership"""

from typing import Collection, List, Optional
from uuid import UUID
from sqlalchemy import select, delete, insert, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.access import Principal
from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.database import atomic
from app.models.assignment import assignment_groups
from app.utils.time import utc_now
from app.models.cohort import Cohort
from app.models.enums import GroupStatus
from app.models.group import Group, user_groups
from app.models.user import User
from app.schemas.directory import GroupCreate, GroupResponse, GroupUpdate
from app.schemas.responses import BulkResult
from app.services.authorization_service import require_admin
from app.services.membership_service import MembershipService

logger = get_logger(__name__)


def serialize_group(group: Group) -> GroupResponse:
    """``group.members`` must be loaded"""
    emails = sorted(m.email for m in group.members)
    return GroupResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        cohort_id=group.cohort_id,
        status=group.status,
        members=emails,
        member_count=len(emails),
        created_at=group.created_at,
    )


class GroupService:
    @staticmethod
    async def get_group(db: AsyncSession, group_id: UUID) -> Optional[Group]:
        result = await db.execute(
            select(Group)
            .options(selectinload(Group.members))
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_group_or_404(db: AsyncSession, group_id: UUID) -> Group:
        group = await GroupService.get_group(db, group_id)
        if not group:
            raise NotFoundError("Group not found")
        return group

    @staticmethod
    async def list_groups(db: AsyncSession, principal: Principal) -> List[Group]:
        """Admins see every group; everyone else only groups they belong to"""
        query = select(Group).options(selectinload(Group.members)).order_by(Group.name)
        if not principal.is_admin:
            query = query.where(Group.members.any(User.id == principal.id))
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def ensure_groups_exist(db: AsyncSession, group_ids: Collection[UUID]) -> None:
        if not group_ids:
            return
        result = await db.execute(select(Group.id).where(Group.id.in_(list(group_ids))))
        found = {row[0] for row in result.all()}
        missing = [str(gid) for gid in group_ids if gid not in found]
        if missing:
            raise ValidationError(f"Unknown group ids: {', '.join(missing)}")

    @staticmethod
    async def _ensure_cohort_exists(db: AsyncSession, cohort_id: Optional[UUID]) -> None:
        if cohort_id is None:
            return
        result = await db.execute(select(Cohort.id).where(Cohort.id == cohort_id))
        if not result.first():
            raise ValidationError(f"Unknown cohort id: {cohort_id}")

    @staticmethod
    async def _ensure_users_exist(db: AsyncSession, user_ids: Collection[UUID]) -> None:
        if not user_ids:
            return
        result = await db.execute(select(User.id).where(User.id.in_(list(user_ids))))
        found = {row[0] for row in result.all()}
        missing = [str(uid) for uid in user_ids if uid not in found]
        if missing:
            raise ValidationError(f"Unknown user ids: {', '.join(missing)}")

    @staticmethod
    async def create_group(db: AsyncSession, principal: Principal, data: GroupCreate) -> Group:
        require_admin(principal, "create groups").ensure()
        await GroupService._ensure_cohort_exists(db, data.cohort_id)
        member_ids = list(dict.fromkeys(data.member_ids))
        await GroupService._ensure_users_exist(db, member_ids)

        async with atomic(db):
            group = Group(
                name=data.name,
                description=data.description,
                cohort_id=data.cohort_id,
                status=data.status,
            )
            db.add(group)
            await db.flush()
            if member_ids:
                now = utc_now()
                await db.execute(
                    insert(user_groups),
                    [{"user_id": uid, "group_id": group.id, "joined_at": now} for uid in member_ids],
                )

        logger.info("Group created", extra={"principal_id": principal.id, "group_id": str(group.id)})
        return await GroupService.get_group_or_404(db, group.id)

    @staticmethod
    async def update_group(
        db: AsyncSession,
        principal: Principal,
        group_id: UUID,
        data: GroupUpdate,
    ) -> Group:
        """Scalar changes and membership reconciliation land in one transaction"""
        require_admin(principal, "update groups").ensure()
        group = await GroupService.get_group_or_404(db, group_id)

        update_data = data.model_dump(exclude_unset=True)
        member_ids = update_data.pop("member_ids", None)
        if "cohort_id" in update_data:
            await GroupService._ensure_cohort_exists(db, update_data["cohort_id"])
        if member_ids is not None:
            await GroupService._ensure_users_exist(db, member_ids)
        for field in ("name", "status"):
            if field in update_data and update_data[field] is None:
                raise ValidationError(f"{field} cannot be cleared")

        async with atomic(db):
            for field, value in update_data.items():
                setattr(group, field, value)
            if member_ids is not None:
                added, removed = await MembershipService.sync_group_members(db, group_id, member_ids)
                logger.info(
                    "Group membership reconciled",
                    extra={"group_id": str(group_id), "added": len(added), "removed": len(removed)},
                )

        logger.info("Group updated", extra={"principal_id": principal.id, "group_id": str(group_id)})
        return await GroupService.get_group_or_404(db, group_id)

    @staticmethod
    async def delete_group(db: AsyncSession, principal: Principal, group_id: UUID) -> None:
        require_admin(principal, "delete groups").ensure()
        group = await GroupService.get_group(db, group_id)
        if not group:
            raise NotFoundError("Group not found")

        # Assignments whose only target is this group turn global once it goes
        other = assignment_groups.alias("other")
        other_links = (
            select(func.count())
            .select_from(other)
            .where(other.c.assignment_id == assignment_groups.c.assignment_id)
            .scalar_subquery()
        )
        async with atomic(db):
            orphaned = await db.execute(
                select(assignment_groups.c.assignment_id).where(
                    assignment_groups.c.group_id == group_id,
                    other_links == 1,
                )
            )
            orphaned_ids = [str(row[0]) for row in orphaned.all()]

            await db.execute(delete(assignment_groups).where(assignment_groups.c.group_id == group_id))
            await db.execute(delete(user_groups).where(user_groups.c.group_id == group_id))
            await db.execute(delete(Group).where(Group.id == group_id))

        if orphaned_ids:
            logger.warning(
                "Group deletion left assignments without target groups; they are now global",
                extra={"group_id": str(group_id), "assignment_ids": orphaned_ids},
            )
        logger.info("Group deleted", extra={"principal_id": principal.id, "group_id": str(group_id)})

    @staticmethod
    async def bulk_delete_groups(db: AsyncSession, principal: Principal, group_ids: List[UUID]) -> BulkResult:
        """Each group is deleted on its own; failures are reported, not rolled back"""
        require_admin(principal, "delete groups").ensure()
        report = BulkResult()
        for group_id in dict.fromkeys(group_ids):
            try:
                await GroupService.delete_group(db, principal, group_id)
            except AppError as exc:
                report.record(str(group_id), False, id=group_id, error=exc.message)
            else:
                report.record(str(group_id), True, id=group_id)
        return report

    @staticmethod
    async def bulk_set_status(
        db: AsyncSession,
        principal: Principal,
        group_ids: List[UUID],
        status: GroupStatus,
    ) -> BulkResult:
        require_admin(principal, "update groups").ensure()
        report = BulkResult()
        for group_id in dict.fromkeys(group_ids):
            try:
                await GroupService.update_group(db, principal, group_id, GroupUpdate(status=status))
            except AppError as exc:
                report.record(str(group_id), False, id=group_id, error=exc.message)
            else:
                report.record(str(group_id), True, id=group_id)
        return report
