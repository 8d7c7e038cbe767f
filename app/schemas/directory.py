"""Directory schemas: cohorts, groups, users"""

from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator, model_validator
from uuid import UUID
from datetime import datetime

from app.models.enums import GroupStatus, UserRole, UserStatus
from app.schemas.assignment import GroupBrief
from app.utils.time import to_naive_utc


# Cohorts
class CohortBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CohortCreate(CohortBase):
    is_active: bool = True


class CohortUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CohortResponse(CohortBase):
    id: UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Groups
class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    cohort_id: Optional[UUID] = None
    status: GroupStatus = GroupStatus.ACTIVE
    member_ids: List[UUID] = []


class GroupUpdate(BaseModel):
    """Partial update. ``member_ids`` present means reconcile membership."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    cohort_id: Optional[UUID] = None
    status: Optional[GroupStatus] = None
    member_ids: Optional[List[UUID]] = None


class GroupResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    cohort_id: Optional[UUID] = None
    status: GroupStatus
    members: List[str] = []  # emails
    member_count: int = 0
    created_at: datetime


class GroupBulkDelete(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)


class GroupBulkStatus(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)
    status: GroupStatus


# Users
class UserCreate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=255)
    role: UserRole = UserRole.DEVELOPER
    status: UserStatus = UserStatus.ACTIVE
    is_trainee: bool = False
    group_ids: List[UUID] = []


class UserUpdate(BaseModel):
    """Partial update. ``group_ids`` present means reassign groups."""
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=255)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    is_trainee: Optional[bool] = None
    group_ids: Optional[List[UUID]] = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: UserRole
    status: UserStatus
    is_trainee: bool
    created_at: datetime
    groups: List[GroupBrief] = []

    model_config = ConfigDict(from_attributes=True)


class UserBulkCreate(BaseModel):
    users: List[UserCreate] = Field(..., min_length=1)


class UserBulkDelete(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)
