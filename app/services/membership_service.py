"""Membership Service - who belongs to which group"""

from typing import Iterable, List, Set, Tuple
from uuid import UUID
from sqlalchemy import select, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.group import user_groups
from app.utils.time import utc_now
from app.utils.reconcile import diff_ids


class MembershipService:
    """Reads and diff-based writes over the ``user_groups`` join"""

    @staticmethod
    async def resolve_group_ids(db: AsyncSession, user_id: UUID) -> Set[UUID]:
        """Ids of every group the user belongs to (possibly empty)"""
        result = await db.execute(
            select(user_groups.c.group_id).where(user_groups.c.user_id == user_id)
        )
        return {row[0] for row in result.all()}

    @staticmethod
    async def member_ids(db: AsyncSession, group_id: UUID) -> Set[UUID]:
        result = await db.execute(
            select(user_groups.c.user_id).where(user_groups.c.group_id == group_id)
        )
        return {row[0] for row in result.all()}

    @staticmethod
    async def sync_user_groups(
        db: AsyncSession,
        user_id: UUID,
        requested_group_ids: Iterable[UUID],
    ) -> Tuple[List[UUID], List[UUID]]:
        """
        Make the user's memberships equal ``requested_group_ids``.
        Does not commit; callers wrap it in their own atomic unit.
        """
        current = await MembershipService.resolve_group_ids(db, user_id)
        to_add, to_remove = diff_ids(current, requested_group_ids)
        if to_remove:
            await db.execute(
                delete(user_groups).where(
                    user_groups.c.user_id == user_id,
                    user_groups.c.group_id.in_(to_remove),
                )
            )
        if to_add:
            now = utc_now()
            await db.execute(
                insert(user_groups),
                [{"user_id": user_id, "group_id": gid, "joined_at": now} for gid in to_add],
            )
        return to_add, to_remove

    @staticmethod
    async def sync_group_members(
        db: AsyncSession,
        group_id: UUID,
        requested_user_ids: Iterable[UUID],
    ) -> Tuple[List[UUID], List[UUID]]:
        """Make the group's member set equal ``requested_user_ids``. Does not commit."""
        current = await MembershipService.member_ids(db, group_id)
        to_add, to_remove = diff_ids(current, requested_user_ids)
        if to_remove:
            await db.execute(
                delete(user_groups).where(
                    user_groups.c.group_id == group_id,
                    user_groups.c.user_id.in_(to_remove),
                )
            )
        if to_add:
            now = utc_now()
            await db.execute(
                insert(user_groups),
                [{"user_id": uid, "group_id": group_id, "joined_at": now} for uid in to_add],
            )
        return to_add, to_remove
