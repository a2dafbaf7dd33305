"""Membership policy: pure authorization predicates over loaded aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .schema.enums import WorkspaceRole

if TYPE_CHECKING:  # pragma: no cover
    from .aggregates import ProjectAggregate, WorkspaceAggregate

__all__ = [
    "is_owner",
    "is_admin",
    "is_workspace_member",
    "is_team_lead",
    "is_project_member",
    "can_manage_invitations",
    "can_manage_project",
]


def is_owner(workspace: "WorkspaceAggregate", user_id: str) -> bool:
    return workspace.workspace.owner_id == user_id


def is_admin(workspace: "WorkspaceAggregate", user_id: str) -> bool:
    """Owner, or a member row carrying the ADMIN role."""

    if is_owner(workspace, user_id):
        return True
    member = workspace.member(user_id)
    return member is not None and member.role == WorkspaceRole.ADMIN


def is_workspace_member(workspace: "WorkspaceAggregate", user_id: str) -> bool:
    return is_owner(workspace, user_id) or workspace.member(user_id) is not None


def is_team_lead(project: "ProjectAggregate", user_id: str) -> bool:
    lead = project.project.team_lead_id
    return lead is not None and lead == user_id


def is_project_member(project: "ProjectAggregate", user_id: str) -> bool:
    """Team lead, or a member row."""

    return is_team_lead(project, user_id) or project.member(user_id) is not None


def can_manage_invitations(workspace: "WorkspaceAggregate", user_id: str) -> bool:
    return is_owner(workspace, user_id) or is_admin(workspace, user_id)


def can_manage_project(
    project: "ProjectAggregate",
    workspace: Optional["WorkspaceAggregate"],
    user_id: str,
) -> bool:
    """Project team lead, or owner/admin of the owning workspace."""

    if is_team_lead(project, user_id):
        return True
    return workspace is not None and can_manage_invitations(workspace, user_id)
