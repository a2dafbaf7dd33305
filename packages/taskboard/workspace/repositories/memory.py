"""Dict-backed repositories for tests and embedding callers."""

from __future__ import annotations

import copy
import threading
from typing import Optional

from ..aggregates import ProjectAggregate, WorkspaceAggregate
from ..entities import Invitation
from ..errors import ConflictError, NotFoundError
from ..schema.enums import InvitationStatus

__all__ = [
    "InMemoryWorkspaceRepository",
    "InMemoryProjectRepository",
    "InMemoryInvitationRepository",
]


def _newest_first(invitations: list[Invitation]) -> list[Invitation]:
    return sorted(invitations, key=lambda i: i.created_at, reverse=True)


def _snapshot(aggregate):
    stored = copy.deepcopy(aggregate)
    stored.pull_events()
    return stored


class InMemoryWorkspaceRepository:
    """Stores deep copies so an unsaved mutation never leaks into the store."""

    def __init__(self) -> None:
        self._items: dict[str, WorkspaceAggregate] = {}
        self._lock = threading.Lock()

    def get(self, workspace_id: str) -> Optional[WorkspaceAggregate]:
        with self._lock:
            aggregate = self._items.get(workspace_id)
            return copy.deepcopy(aggregate) if aggregate is not None else None

    def add(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        with self._lock:
            if aggregate.id in self._items:
                raise ConflictError(f"Workspace {aggregate.id} already exists")
            slug = aggregate.workspace.slug
            if any(w.workspace.slug == slug for w in self._items.values()):
                raise ConflictError(f"Workspace slug '{slug}' is already taken")
            self._items[aggregate.id] = _snapshot(aggregate)
        return aggregate

    def save(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        with self._lock:
            if aggregate.id not in self._items:
                raise NotFoundError("Workspace", aggregate.id)
            self._items[aggregate.id] = _snapshot(aggregate)
        return aggregate


class InMemoryProjectRepository:
    def __init__(self) -> None:
        self._items: dict[str, ProjectAggregate] = {}
        self._lock = threading.Lock()

    def get(self, project_id: str) -> Optional[ProjectAggregate]:
        with self._lock:
            aggregate = self._items.get(project_id)
            return copy.deepcopy(aggregate) if aggregate is not None else None

    def add(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        with self._lock:
            if aggregate.id in self._items:
                raise ConflictError(f"Project {aggregate.id} already exists")
            self._items[aggregate.id] = _snapshot(aggregate)
        return aggregate

    def save(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        with self._lock:
            if aggregate.id not in self._items:
                raise NotFoundError("Project", aggregate.id)
            self._items[aggregate.id] = _snapshot(aggregate)
        return aggregate


class InMemoryInvitationRepository:
    def __init__(self) -> None:
        self._items: dict[str, Invitation] = {}
        self._lock = threading.Lock()

    def get(self, invitation_id: str) -> Optional[Invitation]:
        with self._lock:
            invitation = self._items.get(invitation_id)
            return copy.deepcopy(invitation) if invitation is not None else None

    def get_by_token(self, token: str) -> Optional[Invitation]:
        with self._lock:
            for invitation in self._items.values():
                if invitation.token == token:
                    return copy.deepcopy(invitation)
        return None

    def find_pending(
        self,
        email: str,
        workspace_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[Invitation]:
        with self._lock:
            found = self._find_pending(email, workspace_id, project_id)
            return copy.deepcopy(found) if found is not None else None

    def add(self, invitation: Invitation) -> Invitation:
        # The pending check and the insert share one critical section.
        with self._lock:
            if any(i.token == invitation.token for i in self._items.values()):
                raise ConflictError("Invitation token collision")
            if invitation.status == InvitationStatus.PENDING and self._find_pending(
                invitation.email, invitation.workspace_id, invitation.project_id
            ):
                raise ConflictError("User already has a pending invitation to this target")
            self._items[invitation.id] = copy.deepcopy(invitation)
        return invitation

    def update(self, invitation: Invitation) -> Invitation:
        with self._lock:
            if invitation.id not in self._items:
                raise NotFoundError("Invitation", invitation.id)
            self._items[invitation.id] = copy.deepcopy(invitation)
        return invitation

    def list_for_workspace(self, workspace_id: str) -> list[Invitation]:
        with self._lock:
            matches = [i for i in self._items.values() if i.workspace_id == workspace_id]
            return copy.deepcopy(_newest_first(matches))

    def list_for_project(self, project_id: str) -> list[Invitation]:
        with self._lock:
            matches = [i for i in self._items.values() if i.project_id == project_id]
            return copy.deepcopy(_newest_first(matches))

    def list_for_email(self, email: str) -> list[Invitation]:
        with self._lock:
            matches = [i for i in self._items.values() if i.email == email]
            return copy.deepcopy(_newest_first(matches))

    def _find_pending(
        self,
        email: str,
        workspace_id: Optional[str],
        project_id: Optional[str],
    ) -> Optional[Invitation]:
        for invitation in self._items.values():
            if invitation.email != email or invitation.status != InvitationStatus.PENDING:
                continue
            if workspace_id is not None and invitation.workspace_id != workspace_id:
                continue
            if project_id is not None and invitation.project_id != project_id:
                continue
            return invitation
        return None
