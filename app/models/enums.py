"""Centralized Enum Definitions"""

import enum


# Directory
class UserRole(str, enum.Enum):
    """Role tiers: BOARD_ADMIN > {TECH_LEAD, PRODUCT_MANAGER} > DEVELOPER"""
    DEVELOPER = "DEVELOPER"
    TECH_LEAD = "TECH_LEAD"
    PRODUCT_MANAGER = "PRODUCT_MANAGER"
    BOARD_ADMIN = "BOARD_ADMIN"


class UserStatus(str, enum.Enum):
    """Alumni and archived users see nothing regardless of role"""
    ACTIVE = "ACTIVE"
    ALUMNI = "ALUMNI"
    ARCHIVED = "ARCHIVED"


class GroupStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


# Content
class AssignmentType(str, enum.Enum):
    """Kind of learning content an assignment links to"""
    VIDEO = "VIDEO"
    PDF = "PDF"
    LINK = "LINK"
    DOCUMENT = "DOCUMENT"


class CompletionState(str, enum.Enum):
    """Per-user status in assignment stats"""
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
