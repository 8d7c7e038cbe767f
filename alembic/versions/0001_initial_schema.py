"""initial schema: users, cohorts, groups, assignments, links and completions

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None

_ENUMS = {
    "user_role": ("DEVELOPER", "TECH_LEAD", "PRODUCT_MANAGER", "BOARD_ADMIN"),
    "user_status": ("ACTIVE", "ALUMNI", "ARCHIVED"),
    "group_status": ("ACTIVE", "ARCHIVED"),
    "assignment_type": ("VIDEO", "PDF", "LINK", "DOCUMENT"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _timestamps() -> list:
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    for name, values in _ENUMS.items():
        op.execute(f"CREATE TYPE {name} AS ENUM ({', '.join(repr(v) for v in values)})")

    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("status", _enum("user_status"), nullable=False),
        sa.Column("is_trainee", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_status"), "users", ["status"], unique=False)

    op.create_table(
        "cohorts",
        *_timestamps(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cohorts_id"), "cohorts", ["id"], unique=False)
    op.create_index(op.f("ix_cohorts_name"), "cohorts", ["name"], unique=True)
    op.create_index(op.f("ix_cohorts_is_active"), "cohorts", ["is_active"], unique=False)

    op.create_table(
        "groups",
        *_timestamps(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cohort_id", sa.UUID(), nullable=True),
        sa.Column("status", _enum("group_status"), nullable=False),
        sa.ForeignKeyConstraint(["cohort_id"], ["cohorts.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_groups_id"), "groups", ["id"], unique=False)
    op.create_index(op.f("ix_groups_cohort_id"), "groups", ["cohort_id"], unique=False)
    op.create_index(op.f("ix_groups_status"), "groups", ["status"], unique=False)

    op.create_table(
        "assignments",
        *_timestamps(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", _enum("assignment_type"), nullable=False),
        sa.Column("content_url", sa.String(2048), nullable=False),
        sa.Column("thumbnail_url", sa.String(2048), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_assignments_id"), "assignments", ["id"], unique=False)

    op.create_table(
        "user_groups",
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("group_id", sa.UUID(), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "group_id"),
    )
    op.create_index(op.f("ix_user_groups_group_id"), "user_groups", ["group_id"], unique=False)

    op.create_table(
        "assignment_groups",
        sa.Column("assignment_id", sa.UUID(), nullable=False),
        sa.Column("group_id", sa.UUID(), nullable=False),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("assignment_id", "group_id"),
    )
    op.create_index(op.f("ix_assignment_groups_group_id"), "assignment_groups", ["group_id"], unique=False)

    op.create_table(
        "completions",
        *_timestamps(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("assignment_id", sa.UUID(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "assignment_id", name="uq_completions_user_assignment"),
    )
    op.create_index(op.f("ix_completions_id"), "completions", ["id"], unique=False)
    op.create_index(op.f("ix_completions_user_id"), "completions", ["user_id"], unique=False)
    op.create_index(op.f("ix_completions_assignment_id"), "completions", ["assignment_id"], unique=False)


def downgrade() -> None:
    op.drop_table("completions")
    op.drop_table("assignment_groups")
    op.drop_table("user_groups")
    op.drop_table("assignments")
    op.drop_table("groups")
    op.drop_table("cohorts")
    op.drop_table("users")
    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
