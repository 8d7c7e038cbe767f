from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, computed_field, field_validator
from uuid import UUID
from datetime import datetime

from app.models.enums import AssignmentType, CompletionState, GroupStatus
from app.utils.time import to_naive_utc


class GroupBrief(BaseModel):
    """Minimal group info for embedding in assignment/user responses."""
    id: UUID
    name: str
    cohort_id: Optional[UUID] = None
    status: GroupStatus

    model_config = ConfigDict(from_attributes=True)


class AssignmentBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: AssignmentType
    content_url: str = Field(..., min_length=1, max_length=2048)
    thumbnail_url: Optional[str] = Field(None, max_length=2048)
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class AssignmentCreate(AssignmentBase):
    # Empty list = global assignment (admins only by default)
    group_ids: List[UUID] = []


class AssignmentUpdate(BaseModel):
    """Partial update. ``group_ids`` present means retarget."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[AssignmentType] = None
    content_url: Optional[str] = Field(None, min_length=1, max_length=2048)
    thumbnail_url: Optional[str] = Field(None, max_length=2048)
    due_date: Optional[datetime] = None
    group_ids: Optional[List[UUID]] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class AssignmentResponse(AssignmentBase):
    id: UUID
    created_at: datetime
    updated_at: datetime
    groups: List[GroupBrief] = []

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def is_global(self) -> bool:
        return not self.groups


class AssigneeStatus(BaseModel):
    user_id: UUID
    email: str
    full_name: str
    status: CompletionState
    completed_at: Optional[datetime] = None


class AssignmentStats(BaseModel):
    assignment_id: UUID
    assignment_title: str
    total_assigned: int
    total_completed: int
    completion_rate: float
    details: List[AssigneeStatus] = []


class CompletionToggle(BaseModel):
    assignment_id: UUID


class CompletionToggleResult(BaseModel):
    completed: bool


class CompletionResponse(BaseModel):
    id: UUID
    assignment_id: UUID
    user_email: str
    completed_at: datetime
