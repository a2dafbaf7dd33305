"""Repository boundary: protocols plus in-memory and SQLAlchemy stores."""

from .base import InvitationRepository, ProjectRepository, WorkspaceRepository
from .memory import (
    InMemoryInvitationRepository,
    InMemoryProjectRepository,
    InMemoryWorkspaceRepository,
)
from .sql import SqlInvitationRepository, SqlProjectRepository, SqlWorkspaceRepository

__all__ = [
    "WorkspaceRepository",
    "ProjectRepository",
    "InvitationRepository",
    "InMemoryWorkspaceRepository",
    "InMemoryProjectRepository",
    "InMemoryInvitationRepository",
    "SqlWorkspaceRepository",
    "SqlProjectRepository",
    "SqlInvitationRepository",
]
