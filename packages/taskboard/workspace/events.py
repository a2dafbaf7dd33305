"""Domain events recorded by aggregates on successful mutations."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from .entities import utcnow
from .schema.enums import ProjectStatus, WorkspaceRole

__all__ = [
    "DomainEvent",
    "WorkspaceMemberAdded",
    "WorkspaceMemberRemoved",
    "WorkspaceMemberRoleChanged",
    "ProjectMemberAdded",
    "ProjectMemberRemoved",
    "ProjectStatusChanged",
    "TaskAssigned",
]


@dataclass(frozen=True)
class DomainEvent:
    occurred_on: dt.datetime = field(default_factory=utcnow, kw_only=True)


@dataclass(frozen=True)
class WorkspaceMemberAdded(DomainEvent):
    workspace_id: str
    user_id: str
    role: WorkspaceRole


@dataclass(frozen=True)
class WorkspaceMemberRemoved(DomainEvent):
    workspace_id: str
    user_id: str


@dataclass(frozen=True)
class WorkspaceMemberRoleChanged(DomainEvent):
    workspace_id: str
    user_id: str
    old_role: WorkspaceRole
    new_role: WorkspaceRole


@dataclass(frozen=True)
class ProjectMemberAdded(DomainEvent):
    project_id: str
    user_id: str


@dataclass(frozen=True)
class ProjectMemberRemoved(DomainEvent):
    project_id: str
    user_id: str


@dataclass(frozen=True)
class ProjectStatusChanged(DomainEvent):
    project_id: str
    old_status: ProjectStatus
    new_status: ProjectStatus


@dataclass(frozen=True)
class TaskAssigned(DomainEvent):
    project_id: str
    task_id: str
    assignee_id: Optional[str]
