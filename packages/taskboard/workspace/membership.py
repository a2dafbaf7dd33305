"""Load, mutate and save wrappers over the workspace and project aggregates."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Optional, TypeVar

from . import policy
from .aggregates import ProjectAggregate, TaskStatistics, WorkspaceAggregate
from .entities import Project, Task, Workspace, WorkspaceMember
from .errors import DomainError, NotFoundError, UnauthorizedError
from .repositories import ProjectRepository, WorkspaceRepository
from .result import Result
from .schema.enums import Priority, ProjectStatus, TaskStatus, TaskType, WorkspaceRole

__all__ = ["MembershipService"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

T = TypeVar("T")


class MembershipService:
    """Membership and task commands for workspaces and projects.

    Each command loads the aggregate, applies one mutation, and saves only
    when the mutation succeeded. Failures come back as :class:`Result`.
    """

    def __init__(self, workspaces: WorkspaceRepository, projects: ProjectRepository):
        self.workspaces = workspaces
        self.projects = projects

    # ------------------------------------------------------------------
    # creation
    # ------------------------------------------------------------------

    def create_workspace(
        self,
        name: str,
        slug: str,
        owner_id: str,
        description: Optional[str] = None,
    ) -> Result[WorkspaceAggregate]:
        try:
            aggregate = WorkspaceAggregate(
                Workspace(name=name, slug=slug, owner_id=owner_id, description=description)
            )
            self.workspaces.add(aggregate)
        except DomainError as exc:
            return self._reject(exc)
        logger.info("Workspace %s (%s) created by %s", aggregate.id, slug, owner_id)
        return Result.success(aggregate)

    def create_project(
        self,
        workspace_id: str,
        name: str,
        actor_id: str,
        *,
        description: str = "",
        priority: Priority = Priority.MEDIUM,
        team_lead_id: Optional[str] = None,
        start_date: Optional[dt.datetime] = None,
        end_date: Optional[dt.datetime] = None,
    ) -> Result[ProjectAggregate]:
        """Create a project; the team lead defaults to the acting user."""

        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            return self._reject(NotFoundError("Workspace", workspace_id, "Workspace not found"))
        if not policy.can_manage_invitations(workspace, actor_id):
            return self._reject(
                UnauthorizedError("Only workspace owners or admins can create projects")
            )

        try:
            project = Project(
                name=name,
                workspace_id=workspace_id,
                description=description,
                priority=priority,
                team_lead_id=team_lead_id or actor_id,
                start_date=start_date,
                end_date=end_date,
            )
        except DomainError as exc:
            return self._reject(exc)
        attached = workspace.add_project(project)
        if not attached.ok:
            return self._reject(attached.error)  # type: ignore[arg-type]

        aggregate = ProjectAggregate(project)
        try:
            self.projects.add(aggregate)
            self.workspaces.save(workspace)
        except DomainError as exc:
            return self._reject(exc)
        logger.info("Project %s created in workspace %s", project.id, workspace_id)
        return Result.success(aggregate)

    # ------------------------------------------------------------------
    # workspace membership
    # ------------------------------------------------------------------

    def add_workspace_member(
        self,
        workspace_id: str,
        user_id: str,
        actor_id: str,
        role: WorkspaceRole = WorkspaceRole.MEMBER,
        message: str = "",
    ) -> Result[WorkspaceMember]:
        return self._workspace_command(
            workspace_id, actor_id, lambda ws: ws.add_member(user_id, role, message)
        )

    def remove_workspace_member(
        self, workspace_id: str, user_id: str, actor_id: str
    ) -> Result[Optional[WorkspaceMember]]:
        return self._workspace_command(
            workspace_id, actor_id, lambda ws: ws.remove_member(user_id)
        )

    def change_workspace_member_role(
        self, workspace_id: str, user_id: str, new_role: WorkspaceRole, actor_id: str
    ) -> Result[WorkspaceMember]:
        return self._workspace_command(
            workspace_id, actor_id, lambda ws: ws.change_member_role(user_id, new_role)
        )

    # ------------------------------------------------------------------
    # project membership
    # ------------------------------------------------------------------

    def add_project_member(self, project_id: str, user_id: str, actor_id: str):
        return self._project_command(
            project_id, actor_id, lambda p: p.add_member(user_id)
        )

    def remove_project_member(self, project_id: str, user_id: str, actor_id: str):
        return self._project_command(
            project_id, actor_id, lambda p: p.remove_member(user_id)
        )

    # ------------------------------------------------------------------
    # tasks and status
    # ------------------------------------------------------------------

    def add_task(
        self,
        project_id: str,
        title: str,
        actor_id: str,
        *,
        description: str = "",
        type: TaskType = TaskType.TASK,
        priority: Priority = Priority.MEDIUM,
        status: TaskStatus = TaskStatus.TODO,
        due_date: Optional[dt.datetime] = None,
    ) -> Result[Task]:
        task = Task(
            project_id=project_id,
            title=title,
            description=description,
            type=type,
            priority=priority,
            status=status,
            due_date=due_date,
        )
        return self._project_command(
            project_id, actor_id, lambda p: p.add_task(task), owner_only=True
        )

    def update_task_status(
        self, project_id: str, task_id: str, new_status: TaskStatus, actor_id: str
    ) -> Result[Task]:
        return self._project_command(
            project_id,
            actor_id,
            lambda p: p.update_task_status(task_id, new_status),
            owner_only=True,
        )

    def assign_task(
        self, project_id: str, task_id: str, assignee_id: Optional[str], actor_id: str
    ) -> Result[Task]:
        """Assign ``task_id``; ``assignee_id=None`` clears the assignee."""

        if assignee_id is None:
            return self._project_command(
                project_id, actor_id, lambda p: p.unassign_task(task_id), owner_only=True
            )
        return self._project_command(
            project_id, actor_id, lambda p: p.assign_task(task_id, assignee_id), owner_only=True
        )

    def change_project_status(
        self, project_id: str, new_status: ProjectStatus, actor_id: str
    ) -> Result[Project]:
        return self._project_command(project_id, actor_id, lambda p: p.change_status(new_status))

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def get_workspace(self, workspace_id: str, user_id: str) -> Result[WorkspaceAggregate]:
        """Owner and members may read a workspace."""

        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            return Result.failure(NotFoundError("Workspace", workspace_id, "Workspace not found"))
        if not policy.is_workspace_member(workspace, user_id):
            return self._reject(UnauthorizedError("Not a member of this workspace"))
        return Result.success(workspace)

    def get_project(self, project_id: str, user_id: str) -> Result[ProjectAggregate]:
        """Project members and members of the owning workspace may read a project."""

        project = self.projects.get(project_id)
        if project is None:
            return Result.failure(NotFoundError("Project", project_id, "Project not found"))
        if not policy.is_project_member(project, user_id):
            workspace = self.workspaces.get(project.project.workspace_id)
            if workspace is None or not policy.is_workspace_member(workspace, user_id):
                return self._reject(UnauthorizedError("Not a member of this project"))
        return Result.success(project)

    def task_statistics(self, project_id: str) -> Result[TaskStatistics]:
        project = self.projects.get(project_id)
        if project is None:
            return Result.failure(NotFoundError("Project", project_id, "Project not found"))
        return Result.success(project.task_statistics())

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _workspace_command(
        self,
        workspace_id: str,
        actor_id: str,
        mutate: Callable[[WorkspaceAggregate], Result[T]],
    ) -> Result[T]:
        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            return self._reject(NotFoundError("Workspace", workspace_id, "Workspace not found"))
        if not policy.can_manage_invitations(workspace, actor_id):
            return self._reject(
                UnauthorizedError("Only workspace owners or admins can manage members")
            )

        outcome = mutate(workspace)
        if not outcome.ok:
            return self._reject(outcome.error)  # type: ignore[arg-type]
        try:
            self.workspaces.save(workspace)
        except DomainError as exc:
            return self._reject(exc)
        _log_events(workspace.pull_events())
        return outcome

    def _project_command(
        self,
        project_id: str,
        actor_id: str,
        mutate: Callable[[ProjectAggregate], Result[T]],
        *,
        owner_only: bool = False,
    ) -> Result[T]:
        """Run ``mutate`` on a project after checking ``actor_id``.

        Task commands are reserved for the owner of the owning workspace;
        everything else accepts the team lead or a workspace owner/admin.
        """

        project = self.projects.get(project_id)
        if project is None:
            return self._reject(NotFoundError("Project", project_id, "Project not found"))
        workspace = self.workspaces.get(project.project.workspace_id)
        if owner_only:
            if workspace is None or not policy.is_owner(workspace, actor_id):
                return self._reject(UnauthorizedError("Only workspace owners can manage tasks"))
        elif not policy.can_manage_project(project, workspace, actor_id):
            return self._reject(
                UnauthorizedError(
                    "Only the project team lead or workspace owners or admins "
                    "can manage this project"
                )
            )

        outcome = mutate(project)
        if not outcome.ok:
            return self._reject(outcome.error)  # type: ignore[arg-type]
        try:
            self.projects.save(project)
        except DomainError as exc:
            return self._reject(exc)
        _log_events(project.pull_events())
        return outcome

    @staticmethod
    def _reject(error: DomainError) -> Result:
        logger.warning("Membership command rejected (%s): %s", error.kind.value, error.message)
        return Result.failure(error)


def _log_events(events) -> None:
    for event in events:
        logger.info("Domain event: %r", event)
