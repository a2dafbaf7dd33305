"""Workspace and workspace membership tables."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, workspace_role_enum
from ..schema.enums import WorkspaceRole

__all__ = ["WorkspaceRecord", "WorkspaceMemberRecord"]


class WorkspaceRecord(Base):
    """Top level tenant owning projects and members."""

    __tablename__ = "workspaces"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    members: Mapped[list["WorkspaceMemberRecord"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
        order_by="WorkspaceMemberRecord.joined_at",
    )


class WorkspaceMemberRecord(Base):
    """Membership row; the owner never appears here."""

    __tablename__ = "workspace_members"
    __table_args__ = (
        UniqueConstraint("user_id", "workspace_id", name="uq_workspace_members_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[WorkspaceRole] = mapped_column(workspace_role_enum(), nullable=False)
    join_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    joined_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    workspace: Mapped[WorkspaceRecord] = relationship(back_populates="members")
