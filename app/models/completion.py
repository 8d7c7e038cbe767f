from sqlalchemy import Column, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, utc_now


class Completion(BaseModel):
    """A user's mark that an assignment is done. At most one per pair."""
    __tablename__ = "completions"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(UUID(as_uuid=True), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    completed_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "assignment_id", name="uq_completions_user_assignment"),
    )

    user = relationship("User", back_populates="completions")
    assignment = relationship("Assignment", back_populates="completions")

    def __repr__(self) -> str:
        return f"<Completion {self.user_id} -> {self.assignment_id}>"
