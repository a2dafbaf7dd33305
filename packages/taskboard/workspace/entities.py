"""Plain domain entities.

Entities reference each other by id only. Cross-entity lookups go through
the repository boundary instead of embedded object graphs.
"""

from __future__ import annotations

import datetime as dt
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ValidationError
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
    "utcnow",
    "new_id",
    "Workspace",
    "WorkspaceMember",
    "Project",
    "ProjectMember",
    "Task",
    "Invitation",
]

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class Workspace:
    """Top-level tenant container."""

    name: str
    slug: str
    owner_id: str
    description: Optional[str] = None
    settings: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    created_at: dt.datetime = field(default_factory=utcnow)
    updated_at: dt.datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Workspace name is required")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValidationError("Workspace name cannot exceed 200 characters")
        if not self.slug or not SLUG_PATTERN.match(self.slug):
            raise ValidationError("Slug must be lowercase alphanumeric with hyphens only")
        if len(self.slug) > MAX_NAME_LENGTH:
            raise ValidationError("Slug cannot exceed 200 characters")
        if not self.owner_id:
            raise ValidationError("Owner ID is required")
        if self.description and len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError("Description cannot exceed 1000 characters")


@dataclass(slots=True)
class WorkspaceMember:
    user_id: str
    workspace_id: str
    role: WorkspaceRole = WorkspaceRole.MEMBER
    join_message: str = ""
    id: str = field(default_factory=new_id)
    joined_at: dt.datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Project:
    """Unit of work inside a workspace."""

    name: str
    workspace_id: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    status: ProjectStatus = ProjectStatus.PLANNING
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    team_lead_id: Optional[str] = None
    progress: int = 0
    id: str = field(default_factory=new_id)
    created_at: dt.datetime = field(default_factory=utcnow)
    updated_at: dt.datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Project name is required")
        if not self.workspace_id:
            raise ValidationError("Workspace ID is required")
        if (
            self.start_date is not None
            and self.end_date is not None
            and not self.start_date < self.end_date
        ):
            raise ValidationError("End date must be after start date")
        if not 0 <= self.progress <= 100:
            raise ValidationError("Progress must be between 0 and 100")


@dataclass(slots=True)
class ProjectMember:
    user_id: str
    project_id: str
    id: str = field(default_factory=new_id)
    added_at: dt.datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Task:
    project_id: str
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    type: TaskType = TaskType.TASK
    priority: Priority = Priority.MEDIUM
    assignee_id: Optional[str] = None
    due_date: Optional[dt.datetime] = None
    id: str = field(default_factory=new_id)
    created_at: dt.datetime = field(default_factory=utcnow)
    updated_at: dt.datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Invitation:
    """Time-bounded, single-use credential granting join rights."""

    email: str
    token: str
    type: InvitationType
    invited_by_id: str
    expires_at: dt.datetime
    workspace_id: Optional[str] = None
    project_id: Optional[str] = None
    status: InvitationStatus = InvitationStatus.PENDING
    id: str = field(default_factory=new_id)
    created_at: dt.datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if (self.workspace_id is None) == (self.project_id is None):
            raise ValidationError(
                "Invitation must target exactly one workspace or project"
            )
        if self.type == InvitationType.WORKSPACE and self.workspace_id is None:
            raise ValidationError("Workspace invitation requires a workspace ID")
        if self.type == InvitationType.PROJECT and self.project_id is None:
            raise ValidationError("Project invitation requires a project ID")

    @property
    def target_id(self) -> str:
        return self.workspace_id if self.workspace_id is not None else self.project_id  # type: ignore[return-value]

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING

    def is_expired(self, now: dt.datetime) -> bool:
        return self.expires_at < now
