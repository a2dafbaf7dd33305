"""Invitation table."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, invitation_status_enum, invitation_type_enum
from ..schema.enums import InvitationStatus, InvitationType

__all__ = ["InvitationRecord"]


class InvitationRecord(Base):
    """Standalone invitation row; only coupled to a target by id."""

    __tablename__ = "invitations"
    __table_args__ = (
        # At most one PENDING invitation per (email, target).
        Index(
            "uq_invitations_pending_workspace",
            "email",
            "workspace_id",
            unique=True,
            sqlite_where=text("status = 'PENDING' AND workspace_id IS NOT NULL"),
            postgresql_where=text("status = 'PENDING' AND workspace_id IS NOT NULL"),
        ),
        Index(
            "uq_invitations_pending_project",
            "email",
            "project_id",
            unique=True,
            sqlite_where=text("status = 'PENDING' AND project_id IS NOT NULL"),
            postgresql_where=text("status = 'PENDING' AND project_id IS NOT NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    type: Mapped[InvitationType] = mapped_column(invitation_type_enum(), nullable=False)
    workspace_id: Mapped[str | None] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE")
    )
    project_id: Mapped[str | None] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE")
    )
    invited_by_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[InvitationStatus] = mapped_column(
        invitation_status_enum(), nullable=False, index=True
    )
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
