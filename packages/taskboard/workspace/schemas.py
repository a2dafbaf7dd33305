"""Pydantic schemas for workspace API requests/responses.

Fields serialize with camelCase aliases (``workspaceId``, ``expiresAt``...)
and accept either spelling on input.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from .aggregates import ProjectAggregate, WorkspaceAggregate
from .schema.enums import (
    InvitationStatus,
    InvitationType,
    Priority,
    ProjectStatus,
    TaskStatus,
    TaskType,
    WorkspaceRole,
)

__all__ = [
    "ApiResponse",
    "InviteToWorkspaceRequest",
    "InviteToProjectRequest",
    "InvitationResponse",
    "WorkspaceCreateRequest",
    "WorkspaceMemberResponse",
    "WorkspaceResponse",
    "ProjectCreateRequest",
    "ProjectMemberResponse",
    "TaskResponse",
    "TaskStatisticsResponse",
    "ProjectResponse",
]

T = TypeVar("T")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(_CamelModel, Generic[T]):
    """Envelope shared by every endpoint: ``{success, data, message}``."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


# ========================================================================
# Invitations
# ========================================================================


class InviteToWorkspaceRequest(_CamelModel):
    workspace_id: str = Field(..., min_length=1)
    email: EmailStr
    role: WorkspaceRole = WorkspaceRole.MEMBER


class InviteToProjectRequest(_CamelModel):
    project_id: str = Field(..., min_length=1)
    email: EmailStr


class InvitationResponse(_CamelModel):
    """Wire shape of an invitation."""

    id: str
    email: str
    token: str
    type: InvitationType
    workspace_id: Optional[str] = None
    project_id: Optional[str] = None
    invited_by_id: str
    status: InvitationStatus
    expires_at: dt.datetime
    created_at: dt.datetime


# ========================================================================
# Workspaces
# ========================================================================


class WorkspaceCreateRequest(_CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=1000)


class WorkspaceMemberResponse(_CamelModel):
    id: str
    user_id: str
    workspace_id: str
    role: WorkspaceRole
    join_message: str
    joined_at: dt.datetime


class WorkspaceResponse(_CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    owner_id: str
    settings: dict[str, Any] = Field(default_factory=dict)
    members: list[WorkspaceMemberResponse] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_aggregate(cls, aggregate: WorkspaceAggregate) -> "WorkspaceResponse":
        workspace = aggregate.workspace
        return cls(
            id=workspace.id,
            name=workspace.name,
            slug=workspace.slug,
            description=workspace.description,
            owner_id=workspace.owner_id,
            settings=dict(workspace.settings),
            members=[WorkspaceMemberResponse.model_validate(m) for m in aggregate.members],
            created_at=workspace.created_at,
            updated_at=workspace.updated_at,
        )


# ========================================================================
# Projects
# ========================================================================


class ProjectCreateRequest(_CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    team_lead_id: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None


class ProjectMemberResponse(_CamelModel):
    id: str
    user_id: str
    project_id: str
    added_at: dt.datetime


class TaskResponse(_CamelModel):
    id: str
    project_id: str
    title: str
    description: str
    status: TaskStatus
    type: TaskType
    priority: Priority
    assignee_id: Optional[str] = None
    due_date: Optional[dt.datetime] = None


class TaskStatisticsResponse(_CamelModel):
    total: int
    todo: int
    in_progress: int
    done: int
    blocked: int


class ProjectResponse(_CamelModel):
    id: str
    workspace_id: str
    name: str
    description: str
    priority: Priority
    status: ProjectStatus
    team_lead_id: Optional[str] = None
    progress: int
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    members: list[ProjectMemberResponse] = Field(default_factory=list)
    tasks: list[TaskResponse] = Field(default_factory=list)
    statistics: TaskStatisticsResponse
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_aggregate(cls, aggregate: ProjectAggregate) -> "ProjectResponse":
        project = aggregate.project
        return cls(
            id=project.id,
            workspace_id=project.workspace_id,
            name=project.name,
            description=project.description,
            priority=project.priority,
            status=project.status,
            team_lead_id=project.team_lead_id,
            progress=project.progress,
            start_date=project.start_date,
            end_date=project.end_date,
            members=[ProjectMemberResponse.model_validate(m) for m in aggregate.members],
            tasks=[TaskResponse.model_validate(t) for t in aggregate.tasks],
            statistics=TaskStatisticsResponse.model_validate(aggregate.task_statistics()),
            created_at=project.created_at,
            updated_at=project.updated_at,
        )
