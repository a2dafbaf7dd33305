"""Canonical workspace enum definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

__all__ = [
    "EnumDefinition",
    "WorkspaceRole",
    "ProjectStatus",
    "Priority",
    "TaskStatus",
    "TaskType",
    "InvitationType",
    "InvitationStatus",
    "ENUM_DEFINITIONS",
    "ENUM_DEFINITION_BY_NAME",
    "sa_enum",
]


class WorkspaceEnum(str, Enum):
    """Base class for workspace enums persisted by name."""

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(item.value for item in cls)


class WorkspaceRole(WorkspaceEnum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class ProjectStatus(WorkspaceEnum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Priority(WorkspaceEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(WorkspaceEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    BLOCKED = "BLOCKED"


class TaskType(WorkspaceEnum):
    FEATURE = "FEATURE"
    BUG = "BUG"
    TASK = "TASK"
    IMPROVEMENT = "IMPROVEMENT"
    OTHER = "OTHER"


class InvitationType(WorkspaceEnum):
    WORKSPACE = "WORKSPACE"
    PROJECT = "PROJECT"


class InvitationStatus(WorkspaceEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


@dataclass(frozen=True)
class EnumDefinition:
    """Metadata describing a stored enum type."""

    name: str
    values: tuple[str, ...]
    enum_cls: type[WorkspaceEnum]

    @property
    def length(self) -> int:
        return max(len(value) for value in self.values)


ENUM_DEFINITIONS: tuple[EnumDefinition, ...] = (
    EnumDefinition("workspace_role", WorkspaceRole.values(), WorkspaceRole),
    EnumDefinition("project_status", ProjectStatus.values(), ProjectStatus),
    EnumDefinition("priority", Priority.values(), Priority),
    EnumDefinition("task_status", TaskStatus.values(), TaskStatus),
    EnumDefinition("task_type", TaskType.values(), TaskType),
    EnumDefinition("invitation_type", InvitationType.values(), InvitationType),
    EnumDefinition("invitation_status", InvitationStatus.values(), InvitationStatus),
)

ENUM_DEFINITION_BY_NAME: Mapping[str, EnumDefinition] = {
    definition.name: definition for definition in ENUM_DEFINITIONS
}

ENUM_DEFINITION_BY_CLASS: Mapping[type[WorkspaceEnum], EnumDefinition] = {
    definition.enum_cls: definition for definition in ENUM_DEFINITIONS
}


def sa_enum(enum_cls: type[WorkspaceEnum]):
    """Return a SQLAlchemy ``Enum`` tied to the canonical definition.

    Stored as a string column so the same models run on SQLite and
    PostgreSQL without a ``CREATE TYPE`` step.
    """

    from sqlalchemy import Enum as SqlEnum

    definition = ENUM_DEFINITION_BY_CLASS[enum_cls]
    return SqlEnum(
        enum_cls,
        name=definition.name,
        native_enum=False,
        length=definition.length,
        validate_strings=True,
    )
