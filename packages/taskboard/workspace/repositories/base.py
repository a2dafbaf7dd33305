"""Repository protocols for the membership core.

The core only talks to storage through these interfaces; it never assumes a
particular engine. ``memory`` and ``sql`` ship the two implementations.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from ..aggregates import ProjectAggregate, WorkspaceAggregate
from ..entities import Invitation

__all__ = ["WorkspaceRepository", "ProjectRepository", "InvitationRepository"]


@runtime_checkable
class WorkspaceRepository(Protocol):
    """Load and persist workspace aggregates."""

    def get(self, workspace_id: str) -> Optional[WorkspaceAggregate]:
        """Return the workspace with its members, or ``None``."""
        ...

    def add(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        """Insert a new workspace. Raises ``ConflictError`` on a taken slug."""
        ...

    def save(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        """Persist the workspace and its member set as a whole."""
        ...


@runtime_checkable
class ProjectRepository(Protocol):
    """Load and persist project aggregates."""

    def get(self, project_id: str) -> Optional[ProjectAggregate]:
        """Return the project with its members and tasks, or ``None``."""
        ...

    def add(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        ...

    def save(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        """Persist the project, its member set and its tasks as a whole."""
        ...


@runtime_checkable
class InvitationRepository(Protocol):
    """Load and persist invitations."""

    def get(self, invitation_id: str) -> Optional[Invitation]:
        ...

    def get_by_token(self, token: str) -> Optional[Invitation]:
        ...

    def find_pending(
        self,
        email: str,
        workspace_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[Invitation]:
        """Return a PENDING invitation for ``email`` and the given target."""
        ...

    def add(self, invitation: Invitation) -> Invitation:
        """Insert an invitation.

        Raises ``ConflictError`` when a PENDING invitation already exists for
        the same (email, target) pair.
        """
        ...

    def update(self, invitation: Invitation) -> Invitation:
        ...

    def list_for_workspace(self, workspace_id: str) -> Sequence[Invitation]:
        """All invitations for a workspace, newest first."""
        ...

    def list_for_project(self, project_id: str) -> Sequence[Invitation]:
        """All invitations for a project, newest first."""
        ...

    def list_for_email(self, email: str) -> Sequence[Invitation]:
        """All invitations addressed to ``email``, newest first."""
        ...
