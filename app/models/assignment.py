from sqlalchemy import Column, String, Text, Table, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import AssignmentType


class Assignment(BaseModel):
    """
    Learning content handed out to groups.
    No linked groups means the assignment is global (targets everyone).
    """
    __tablename__ = "assignments"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(ENUM(AssignmentType, name="assignment_type"), nullable=False)
    content_url = Column(String(2048), nullable=False)
    thumbnail_url = Column(String(2048), nullable=True)
    due_date = Column(DateTime, nullable=True)

    groups = relationship(
        "Group",
        secondary="assignment_groups",
        back_populates="assignments"
    )
    completions = relationship("Completion", back_populates="assignment", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Assignment {self.title}>"


# Association table for Assignment <-> Group (targeting)
assignment_groups = Table(
    "assignment_groups",
    BaseModel.metadata,
    Column("assignment_id", UUID(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", UUID(as_uuid=True), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True, index=True),
)
