"""Shared SQLAlchemy base and enum helpers for workspace models."""

from __future__ import annotations

from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import DeclarativeBase

from ..schema.enums import (
    InvitationStatus,
    InvitationType,
    Priority,
    ProjectStatus,
    TaskStatus,
    TaskType,
    WorkspaceRole,
    sa_enum,
)

__all__ = [
    "Base",
    "workspace_role_enum",
    "project_status_enum",
    "priority_enum",
    "task_status_enum",
    "task_type_enum",
    "invitation_type_enum",
    "invitation_status_enum",
]


class Base(DeclarativeBase):
    """Declarative base class shared by all workspace models."""


# Enum helper factories -----------------------------------------------------

def workspace_role_enum() -> SqlEnum:
    return sa_enum(WorkspaceRole)


def project_status_enum() -> SqlEnum:
    return sa_enum(ProjectStatus)


def priority_enum() -> SqlEnum:
    return sa_enum(Priority)


def task_status_enum() -> SqlEnum:
    return sa_enum(TaskStatus)


def task_type_enum() -> SqlEnum:
    return sa_enum(TaskType)


def invitation_type_enum() -> SqlEnum:
    """Return a configured column type for ``invitation_type``."""

    return sa_enum(InvitationType)


def invitation_status_enum() -> SqlEnum:
    """Return a configured column type for ``invitation_status``."""

    return sa_enum(InvitationStatus)
