"""Directory: User Model"""

from sqlalchemy import Column, String, Boolean
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import UserRole, UserStatus


class User(BaseModel):
    """
    Organization member. Email is the login identity; role and status
    drive every visibility and permission decision.
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    role = Column(ENUM(UserRole, name="user_role"), default=UserRole.DEVELOPER, nullable=False, index=True)
    status = Column(ENUM(UserStatus, name="user_status"), default=UserStatus.ACTIVE, nullable=False, index=True)
    # Bootcamp participant: sees cohort-linked homework
    is_trainee = Column(Boolean, default=False, nullable=False)

    groups = relationship(
        "Group",
        secondary="user_groups",
        back_populates="members"
    )
    completions = relationship("Completion", back_populates="user", passive_deletes=True)

    @property
    def display_name(self) -> str:
        """Full name, falling back to the email local part"""
        return self.full_name or self.email.split("@")[0]

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
