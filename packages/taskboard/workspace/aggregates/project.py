"""Project aggregate: team lead, members, and the task list driving progress."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, Optional

from .. import policy
from ..entities import Project, ProjectMember, Task, utcnow
from ..errors import (
    BusinessRuleViolationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..events import (
    DomainEvent,
    ProjectMemberAdded,
    ProjectMemberRemoved,
    ProjectStatusChanged,
    TaskAssigned,
)
from ..result import Result
from ..schema.enums import ProjectStatus, TaskStatus

__all__ = ["ProjectAggregate", "TaskStatistics", "calculate_progress"]


@dataclass(frozen=True)
class TaskStatistics:
    total: int
    todo: int
    in_progress: int
    done: int
    blocked: int


def calculate_progress(done: int, total: int) -> int:
    """Percentage of done tasks, truncated toward zero.

    Computed in floating point and truncated, so ``29/100`` yields 28.
    """

    if total == 0:
        return 0
    return int((done / float(total)) * 100)


class ProjectAggregate:
    """Consistency boundary around a project, its members, and its tasks."""

    def __init__(
        self,
        project: Project,
        members: Iterable[ProjectMember] = (),
        tasks: Iterable[Task] = (),
    ):
        self._project = project
        self._members: list[ProjectMember] = []
        self._tasks: list[Task] = []
        self._events: list[DomainEvent] = []

        for member in members:
            if any(m.user_id == member.user_id for m in self._members):
                raise ValidationError(
                    f"Duplicate member {member.user_id} in project {project.id}"
                )
            self._members.append(member)
        for task in tasks:
            if task.project_id != project.id:
                raise ValidationError(f"Task {task.id} does not belong to project {project.id}")
            self._tasks.append(task)

    @property
    def id(self) -> str:
        return self._project.id

    @property
    def project(self) -> Project:
        return self._project

    @property
    def members(self) -> tuple[ProjectMember, ...]:
        return tuple(self._members)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def progress(self) -> int:
        return self._project.progress

    def member(self, user_id: str) -> Optional[ProjectMember]:
        return next((m for m in self._members if m.user_id == user_id), None)

    def task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)

    # ------------------------------------------------------------------
    # membership
    # ------------------------------------------------------------------

    def add_member(
        self, user_id: str, added_at: Optional[dt.datetime] = None
    ) -> Result[ProjectMember]:
        if self.member(user_id) is not None:
            return Result.failure(
                ConflictError(f"User {user_id} is already a member of this project")
            )

        member = ProjectMember(
            user_id=user_id,
            project_id=self._project.id,
            added_at=added_at or utcnow(),
        )
        self._members.append(member)
        self._events.append(
            ProjectMemberAdded(project_id=self._project.id, user_id=user_id)
        )
        return Result.success(member)

    def remove_member(self, user_id: str) -> Result[Optional[ProjectMember]]:
        if self._project.team_lead_id is not None and user_id == self._project.team_lead_id:
            return Result.failure(
                BusinessRuleViolationError("Cannot remove the project team lead")
            )

        member = self.member(user_id)
        if member is None:
            return Result.success(None)

        self._members.remove(member)
        self._events.append(
            ProjectMemberRemoved(project_id=self._project.id, user_id=user_id)
        )
        return Result.success(member)

    # ------------------------------------------------------------------
    # tasks
    # ------------------------------------------------------------------

    def add_task(self, task: Task) -> Result[Task]:
        if task.project_id != self._project.id:
            return Result.failure(
                BusinessRuleViolationError("Task does not belong to this project")
            )
        if self.task(task.id) is not None:
            return Result.failure(
                ConflictError(f"Task {task.id} is already part of this project")
            )

        self._tasks.append(task)
        self.update_progress()
        return Result.success(task)

    def update_task_status(self, task_id: str, new_status: TaskStatus) -> Result[Task]:
        task = self.task(task_id)
        if task is None:
            return Result.failure(
                NotFoundError("Task", task_id, message=f"Task {task_id} not found in project")
            )

        task.status = new_status
        task.updated_at = utcnow()
        self.update_progress()
        return Result.success(task)

    def assign_task(self, task_id: str, assignee_id: str) -> Result[Task]:
        """Assign a task to the team lead or a project member."""

        task = self.task(task_id)
        if task is None:
            return Result.failure(
                NotFoundError("Task", task_id, message=f"Task {task_id} not found in project")
            )
        if not self.is_member(assignee_id):
            return Result.failure(
                BusinessRuleViolationError(
                    f"User {assignee_id} is not a member of project {self._project.name}",
                    rule="TaskAssignment",
                )
            )

        task.assignee_id = assignee_id
        task.updated_at = utcnow()
        self._events.append(
            TaskAssigned(
                project_id=self._project.id, task_id=task.id, assignee_id=assignee_id
            )
        )
        return Result.success(task)

    def unassign_task(self, task_id: str) -> Result[Task]:
        task = self.task(task_id)
        if task is None:
            return Result.failure(
                NotFoundError("Task", task_id, message=f"Task {task_id} not found in project")
            )

        task.assignee_id = None
        task.updated_at = utcnow()
        self._events.append(
            TaskAssigned(project_id=self._project.id, task_id=task.id, assignee_id=None)
        )
        return Result.success(task)

    def update_progress(self) -> int:
        done = sum(1 for t in self._tasks if t.status == TaskStatus.DONE)
        self._project.progress = calculate_progress(done, len(self._tasks))
        self._project.updated_at = utcnow()
        return self._project.progress

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def change_status(self, new_status: ProjectStatus) -> Result[Project]:
        """Apply a status change.

        Only COMPLETED -> PLANNING is rejected; every other transition is
        allowed.
        """

        old_status = self._project.status
        if old_status == ProjectStatus.COMPLETED and new_status == ProjectStatus.PLANNING:
            return Result.failure(
                BusinessRuleViolationError(
                    "Cannot change completed project back to planning"
                )
            )

        self._project.status = new_status
        self._project.updated_at = utcnow()
        self._events.append(
            ProjectStatusChanged(
                project_id=self._project.id,
                old_status=old_status,
                new_status=new_status,
            )
        )
        return Result.success(self._project)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def is_member(self, user_id: str) -> bool:
        return policy.is_project_member(self, user_id)

    def is_team_lead(self, user_id: str) -> bool:
        return policy.is_team_lead(self, user_id)

    def task_statistics(self) -> TaskStatistics:
        counts = {status: 0 for status in TaskStatus}
        for task in self._tasks:
            counts[TaskStatus(task.status)] += 1
        return TaskStatistics(
            total=len(self._tasks),
            todo=counts[TaskStatus.TODO],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            done=counts[TaskStatus.DONE],
            blocked=counts[TaskStatus.BLOCKED],
        )

    def pull_events(self) -> list[DomainEvent]:
        events, self._events = self._events, []
        return events

    def __repr__(self) -> str:
        return (
            f"ProjectAggregate(id={self._project.id!r}, members={len(self._members)}, "
            f"tasks={len(self._tasks)}, progress={self._project.progress})"
        )
