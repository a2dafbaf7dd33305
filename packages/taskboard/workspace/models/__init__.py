"""Workspace SQLAlchemy models organized by domain."""

from .base import Base
from .invitations import InvitationRecord
from .projects import ProjectMemberRecord, ProjectRecord, TaskRecord
from .workspaces import WorkspaceMemberRecord, WorkspaceRecord

__all__ = [
    "Base",
    "WorkspaceRecord",
    "WorkspaceMemberRecord",
    "ProjectRecord",
    "ProjectMemberRecord",
    "TaskRecord",
    "InvitationRecord",
]
