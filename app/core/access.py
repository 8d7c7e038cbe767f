"""Access-control vocabulary shared by visibility and authorization.

The policy code never touches ORM rows directly: requests are reduced to a
``Principal`` and each assignment to an ``AssignmentScope`` first.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, Optional, Union
from uuid import UUID

from app.core.exceptions import PermissionDeniedError
from app.models.enums import UserRole, UserStatus


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as resolved by the HTTP boundary"""

    id: UUID
    email: str
    role: UserRole
    status: UserStatus = UserStatus.ACTIVE
    is_trainee: bool = False

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            status=UserStatus(user.status),
            is_trainee=bool(user.is_trainee),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.BOARD_ADMIN

    @property
    def is_blacked_out(self) -> bool:
        """Alumni and archived accounts see nothing"""
        return self.status in (UserStatus.ALUMNI, UserStatus.ARCHIVED)


@dataclass(frozen=True)
class TargetGroup:
    id: UUID
    cohort_id: Optional[UUID] = None

    @property
    def is_cohort_group(self) -> bool:
        return self.cohort_id is not None


@dataclass(frozen=True)
class GlobalScope:
    """Assignment with no linked groups: targets every eligible user"""

    @property
    def group_ids(self) -> FrozenSet[UUID]:
        return frozenset()


@dataclass(frozen=True)
class TargetedGroups:
    groups: FrozenSet[TargetGroup] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.groups:
            raise ValueError("TargetedGroups needs at least one group; use GlobalScope")

    @property
    def group_ids(self) -> FrozenSet[UUID]:
        return frozenset(g.id for g in self.groups)

    @property
    def touches_cohort(self) -> bool:
        return any(g.is_cohort_group for g in self.groups)


AssignmentScope = Union[GlobalScope, TargetedGroups]


def scope_from_groups(groups: Iterable) -> AssignmentScope:
    """
    Build the scope of an assignment from its linked groups.

    Accepts ``Group`` rows or ``TargetGroup`` values; anything with ``id``
    and ``cohort_id`` attributes works.
    """
    targets = frozenset(TargetGroup(id=g.id, cohort_id=g.cohort_id) for g in groups)
    if not targets:
        return GlobalScope()
    return TargetedGroups(targets)


def scope_of(assignment) -> AssignmentScope:
    """Scope of an ``Assignment`` whose ``groups`` relationship is loaded"""
    return scope_from_groups(assignment.groups)


@dataclass(frozen=True)
class Decision:
    """Outcome of a permission check, with the failed rule when denied"""

    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.allowed

    def ensure(self) -> None:
        """Raise ``PermissionDeniedError`` carrying the reason if denied"""
        if not self.allowed:
            raise PermissionDeniedError(self.reason or "Not enough permissions")


def is_subset(candidate: AbstractSet[UUID], managed: AbstractSet[UUID]) -> bool:
    return all(gid in managed for gid in candidate)
