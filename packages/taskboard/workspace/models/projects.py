"""Project, project membership, and task tables."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import (
    Base,
    priority_enum,
    project_status_enum,
    task_status_enum,
    task_type_enum,
)
from ..schema.enums import Priority, ProjectStatus, TaskStatus, TaskType

__all__ = ["ProjectRecord", "ProjectMemberRecord", "TaskRecord"]


class ProjectRecord(Base):
    """Unit of work within a workspace."""

    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_workspace_status", "workspace_id", "status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    priority: Mapped[Priority] = mapped_column(priority_enum(), nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(project_status_enum(), nullable=False)
    start_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    team_lead_id: Mapped[str | None] = mapped_column(String(36))
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    members: Mapped[list["ProjectMemberRecord"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMemberRecord.added_at",
    )
    tasks: Mapped[list["TaskRecord"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="TaskRecord.created_at",
    )


class ProjectMemberRecord(Base):
    """Membership mapping between users and projects."""

    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_project_members_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    added_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    project: Mapped[ProjectRecord] = relationship(back_populates="members")


class TaskRecord(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[TaskStatus] = mapped_column(task_status_enum(), nullable=False)
    type: Mapped[TaskType] = mapped_column(task_type_enum(), nullable=False)
    priority: Mapped[Priority] = mapped_column(priority_enum(), nullable=False)
    assignee_id: Mapped[str | None] = mapped_column(String(36))
    due_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    project: Mapped[ProjectRecord] = relationship(back_populates="tasks")
