"""Cohort Model - time-boxed training programs"""

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.models.base import BaseModel


class Cohort(BaseModel):
    """
    A training program owning zero or more groups.
    Toggling ``is_active`` cascades to every owned group's status.
    """
    __tablename__ = "cohorts"

    name = Column(String(255), unique=True, nullable=False, index=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    groups = relationship("Group", back_populates="cohort")

    def __repr__(self) -> str:
        return f"<Cohort {self.name}>"
