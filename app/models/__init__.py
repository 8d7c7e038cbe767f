"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel, utc_now
from app.models.enums import *
from app.models.user import User
from app.models.cohort import Cohort
from app.models.group import Group, user_groups
from app.models.assignment import Assignment, assignment_groups
from app.models.completion import Completion


__all__ = [
    # Base classes
    "BaseModel",
    "utc_now",

    # Enums
    "UserRole",
    "UserStatus",
    "GroupStatus",
    "AssignmentType",
    "CompletionState",

    # Directory
    "User",
    "Cohort",
    "Group",
    "user_groups",

    # Content
    "Assignment",
    "assignment_groups",
    "Completion",
]
