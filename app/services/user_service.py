"""User Service - directory of people, login registration and bulk admin operations"""

from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func, delete
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access import Principal
from app.core.exceptions import AppError, ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.database import atomic
from app.models.completion import Completion
from app.models.enums import UserRole, UserStatus
from app.models.group import user_groups
from app.models.user import User
from app.schemas.directory import UserCreate, UserUpdate
from app.schemas.responses import BulkResult
from app.services.authorization_service import require_admin
from app.services.group_service import GroupService
from app.services.membership_service import MembershipService

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    """Lower-case and check the institutional suffix"""
    normalized = (email or "").strip().lower()
    suffix = settings.ALLOWED_EMAIL_SUFFIX
    if not normalized or "@" not in normalized or (suffix and not normalized.endswith(suffix)):
        raise ValidationError(f"Valid {suffix} email is required")
    return normalized


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(
            select(User)
            .options(selectinload(User.groups))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
        user = await UserService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User)
            .options(selectinload(User.groups))
            .where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(
        db: AsyncSession,
        principal: Principal,
        page: int = 1,
        page_size: int = 50,
    ) -> Tuple[List[User], int]:
        """Paginated directory listing, ordered by email. Admin only."""
        require_admin(principal, "list users").ensure()

        total = await db.scalar(select(func.count()).select_from(User)) or 0
        result = await db.execute(
            select(User)
            .options(selectinload(User.groups))
            .order_by(User.email)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def login_or_register(db: AsyncSession, email: str) -> User:
        """
        Return the user for ``email``, creating a DEVELOPER on first login.

        An existing user's role is never touched here. Emails listed in
        BOOTSTRAP_ADMIN_EMAILS are created as BOARD_ADMIN instead.
        """
        email = normalize_email(email)
        user = await UserService.get_user_by_email(db, email)
        if user:
            return user

        role = UserRole.BOARD_ADMIN if email in settings.BOOTSTRAP_ADMIN_EMAILS else UserRole.DEVELOPER
        try:
            async with atomic(db):
                db.add(User(email=email, role=role, status=UserStatus.ACTIVE))
        except ConflictError:
            # Registered concurrently by another login; fall through to the read
            pass
        else:
            logger.info("User registered on first login", extra={"email": email, "role": role.value})

        return await UserService.get_user_by_email(db, email)

    @staticmethod
    async def create_user(db: AsyncSession, principal: Principal, data: UserCreate) -> User:
        require_admin(principal, "create users").ensure()
        email = normalize_email(data.email)
        if await UserService.get_user_by_email(db, email):
            raise ConflictError("User with this email already exists")

        group_ids = list(dict.fromkeys(data.group_ids))
        await GroupService.ensure_groups_exist(db, group_ids)

        async with atomic(db):
            user = User(
                email=email,
                full_name=data.full_name,
                role=data.role,
                status=data.status,
                is_trainee=data.is_trainee,
            )
            db.add(user)
            await db.flush()
            if group_ids:
                await MembershipService.sync_user_groups(db, user.id, group_ids)

        logger.info(
            "User created",
            extra={"principal_id": principal.id, "user_id": str(user.id), "role": data.role.value},
        )
        return await UserService.get_user_or_404(db, user.id)

    @staticmethod
    async def bulk_create_users(db: AsyncSession, principal: Principal, items: List[UserCreate]) -> BulkResult:
        """Each user is created on its own; one bad row does not stop the rest"""
        require_admin(principal, "create users").ensure()
        report = BulkResult()
        for item in items:
            try:
                user = await UserService.create_user(db, principal, item)
            except AppError as exc:
                report.record(item.email, False, error=exc.message)
            else:
                report.record(item.email, True, id=user.id)
        return report

    @staticmethod
    async def update_user(
        db: AsyncSession,
        principal: Principal,
        user_id: UUID,
        data: UserUpdate,
    ) -> User:
        """Profile fields and group reassignment commit together or not at all"""
        require_admin(principal, "update users").ensure()
        user = await UserService.get_user_or_404(db, user_id)

        update_data = data.model_dump(exclude_unset=True)
        group_ids = update_data.pop("group_ids", None)
        for field in ("email", "role", "status", "is_trainee"):
            if field in update_data and update_data[field] is None:
                raise ValidationError(f"{field} cannot be cleared")

        if "email" in update_data:
            update_data["email"] = normalize_email(update_data["email"])
            if update_data["email"] != user.email:
                if await UserService.get_user_by_email(db, update_data["email"]):
                    raise ConflictError("User with this email already exists")
        if group_ids is not None:
            group_ids = list(dict.fromkeys(group_ids))
            await GroupService.ensure_groups_exist(db, group_ids)

        async with atomic(db):
            for field, value in update_data.items():
                setattr(user, field, value)
            if group_ids is not None:
                added, removed = await MembershipService.sync_user_groups(db, user_id, group_ids)
                logger.info(
                    "User groups reassigned",
                    extra={"user_id": str(user_id), "added": len(added), "removed": len(removed)},
                )

        logger.info(
            "User updated",
            extra={"principal_id": principal.id, "user_id": str(user_id), "fields": sorted(update_data)},
        )
        return await UserService.get_user_or_404(db, user_id)

    @staticmethod
    async def delete_user(db: AsyncSession, principal: Principal, user_id: UUID) -> None:
        """Removes the user with their completions and memberships"""
        require_admin(principal, "delete users").ensure()
        if user_id == principal.id:
            raise ValidationError("You cannot delete your own account")
        await UserService.get_user_or_404(db, user_id)

        async with atomic(db):
            await db.execute(delete(Completion).where(Completion.user_id == user_id))
            await db.execute(delete(user_groups).where(user_groups.c.user_id == user_id))
            await db.execute(delete(User).where(User.id == user_id))

        logger.info("User deleted", extra={"principal_id": principal.id, "user_id": str(user_id)})

    @staticmethod
    async def bulk_delete_users(db: AsyncSession, principal: Principal, user_ids: List[UUID]) -> BulkResult:
        """The caller's own id is dropped from the batch without an error"""
        require_admin(principal, "delete users").ensure()
        report = BulkResult()
        for user_id in dict.fromkeys(user_ids):
            if user_id == principal.id:
                continue
            try:
                await UserService.delete_user(db, principal, user_id)
            except AppError as exc:
                report.record(str(user_id), False, id=user_id, error=exc.message)
            else:
                report.record(str(user_id), True, id=user_id)
        return report

    @staticmethod
    async def upsert_admin(db: AsyncSession, email: str, full_name: Optional[str] = None) -> User:
        """Create or promote a BOARD_ADMIN. Used by the seed script, not the API."""
        email = normalize_email(email)
        user = await UserService.get_user_by_email(db, email)
        async with atomic(db):
            if user:
                user.role = UserRole.BOARD_ADMIN
                user.status = UserStatus.ACTIVE
                if full_name:
                    user.full_name = full_name
            else:
                db.add(
                    User(email=email, full_name=full_name, role=UserRole.BOARD_ADMIN, status=UserStatus.ACTIVE)
                )
        logger.info("Admin account ensured", extra={"email": email})
        return await UserService.get_user_by_email(db, email)
