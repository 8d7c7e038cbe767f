from sqlalchemy import Column, String, Text, Table, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, utc_now
from app.models.enums import GroupStatus


class Group(BaseModel):
    """
    Set of users that assignments can target. A non-null ``cohort_id``
    marks it as a bootcamp group.
    """
    __tablename__ = "groups"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # RESTRICT: a cohort cannot be deleted while groups reference it
    cohort_id = Column(UUID(as_uuid=True), ForeignKey("cohorts.id", ondelete="RESTRICT"), nullable=True, index=True)
    status = Column(ENUM(GroupStatus, name="group_status"), default=GroupStatus.ACTIVE, nullable=False, index=True)

    cohort = relationship("Cohort", back_populates="groups")
    members = relationship(
        "User",
        secondary="user_groups",
        back_populates="groups"
    )
    assignments = relationship(
        "Assignment",
        secondary="assignment_groups",
        back_populates="groups"
    )

    def __repr__(self) -> str:
        return f"<Group {self.name}>"


# Association table for Group <-> User (membership)
user_groups = Table(
    "user_groups",
    BaseModel.metadata,
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", UUID(as_uuid=True), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("joined_at", DateTime, default=utc_now, nullable=False),
)
