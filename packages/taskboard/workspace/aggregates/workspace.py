"""Workspace aggregate: owner plus a duplicate-free member set."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

from .. import policy
from ..entities import Project, Workspace, WorkspaceMember, utcnow
from ..errors import (
    BusinessRuleViolationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..events import (
    DomainEvent,
    WorkspaceMemberAdded,
    WorkspaceMemberRemoved,
    WorkspaceMemberRoleChanged,
)
from ..result import Result
from ..schema.enums import WorkspaceRole

__all__ = ["WorkspaceAggregate"]


class WorkspaceAggregate:
    """Consistency boundary around a workspace and its members.

    The owner is implicit: it is never stored as a member row and can never
    be removed. No other component mutates the member collection.
    """

    def __init__(
        self,
        workspace: Workspace,
        members: Iterable[WorkspaceMember] = (),
        projects: Iterable[Project] = (),
    ):
        self._workspace = workspace
        self._members: list[WorkspaceMember] = []
        self._projects: list[Project] = list(projects)
        self._events: list[DomainEvent] = []

        for member in members:
            if member.user_id == workspace.owner_id:
                raise ValidationError("Workspace owner cannot be stored as a member")
            if any(m.user_id == member.user_id for m in self._members):
                raise ValidationError(
                    f"Duplicate member {member.user_id} in workspace {workspace.id}"
                )
            self._members.append(member)

    @property
    def id(self) -> str:
        return self._workspace.id

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def members(self) -> tuple[WorkspaceMember, ...]:
        return tuple(self._members)

    @property
    def projects(self) -> tuple[Project, ...]:
        return tuple(self._projects)

    def member(self, user_id: str) -> Optional[WorkspaceMember]:
        return next((m for m in self._members if m.user_id == user_id), None)

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def add_member(
        self,
        user_id: str,
        role: WorkspaceRole = WorkspaceRole.MEMBER,
        message: str = "",
        joined_at: Optional[dt.datetime] = None,
    ) -> Result[WorkspaceMember]:
        if user_id == self._workspace.owner_id:
            return Result.failure(
                ConflictError(f"User {user_id} is the owner of this workspace")
            )
        if self.member(user_id) is not None:
            return Result.failure(
                ConflictError(f"User {user_id} is already a member of this workspace")
            )

        member = WorkspaceMember(
            user_id=user_id,
            workspace_id=self._workspace.id,
            role=role,
            join_message=message,
            joined_at=joined_at or utcnow(),
        )
        self._members.append(member)
        self._touch()
        self._events.append(
            WorkspaceMemberAdded(
                workspace_id=self._workspace.id, user_id=user_id, role=role
            )
        )
        return Result.success(member)

    def remove_member(self, user_id: str) -> Result[Optional[WorkspaceMember]]:
        """Remove ``user_id``; absent users are a successful no-op."""

        if user_id == self._workspace.owner_id:
            return Result.failure(
                BusinessRuleViolationError("Cannot remove the workspace owner")
            )

        member = self.member(user_id)
        if member is None:
            return Result.success(None)

        self._members.remove(member)
        self._touch()
        self._events.append(
            WorkspaceMemberRemoved(workspace_id=self._workspace.id, user_id=user_id)
        )
        return Result.success(member)

    def change_member_role(
        self, user_id: str, new_role: WorkspaceRole
    ) -> Result[WorkspaceMember]:
        member = self.member(user_id)
        if member is None:
            return Result.failure(
                NotFoundError(
                    "WorkspaceMember",
                    user_id,
                    message=f"User {user_id} is not a member of this workspace",
                )
            )

        old_role = member.role
        member.role = new_role
        self._touch()
        self._events.append(
            WorkspaceMemberRoleChanged(
                workspace_id=self._workspace.id,
                user_id=user_id,
                old_role=old_role,
                new_role=new_role,
            )
        )
        return Result.success(member)

    def add_project(self, project: Project) -> Result[Project]:
        if project.workspace_id != self._workspace.id:
            return Result.failure(
                BusinessRuleViolationError("Project does not belong to this workspace")
            )
        if any(p.id == project.id for p in self._projects):
            return Result.failure(
                ConflictError(f"Project {project.id} is already part of this workspace")
            )
        self._projects.append(project)
        return Result.success(project)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def is_member(self, user_id: str) -> bool:
        return policy.is_workspace_member(self, user_id)

    def is_admin(self, user_id: str) -> bool:
        return policy.is_admin(self, user_id)

    def pull_events(self) -> list[DomainEvent]:
        events, self._events = self._events, []
        return events

    def _touch(self) -> None:
        self._workspace.updated_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"WorkspaceAggregate(id={self._workspace.id!r}, "
            f"members={len(self._members)})"
        )
