"""Workspace schema helpers shared between domain code and ORM models."""

from .enums import (
    EnumDefinition,
    InvitationStatus,
    InvitationType,
    Priority,
    ProjectStatus,
    TaskStatus,
    TaskType,
    WorkspaceRole,
    ENUM_DEFINITIONS,
    ENUM_DEFINITION_BY_NAME,
    sa_enum,
)

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
