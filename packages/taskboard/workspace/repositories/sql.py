"""SQLAlchemy-backed repositories."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..aggregates import ProjectAggregate, WorkspaceAggregate
from ..entities import Invitation, Project, ProjectMember, Task, Workspace, WorkspaceMember
from ..errors import ConflictError, NotFoundError
from ..models import (
    InvitationRecord,
    ProjectMemberRecord,
    ProjectRecord,
    TaskRecord,
    WorkspaceMemberRecord,
    WorkspaceRecord,
)
from ..schema.enums import InvitationStatus

__all__ = [
    "SqlWorkspaceRepository",
    "SqlProjectRepository",
    "SqlInvitationRepository",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _aware(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    """SQLite drops tzinfo; stored values are always UTC."""

    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


# ----------------------------------------------------------------------------
# row <-> entity mapping
# ----------------------------------------------------------------------------


def _workspace_from_record(
    record: WorkspaceRecord, projects: list[ProjectRecord]
) -> WorkspaceAggregate:
    workspace = Workspace(
        id=record.id,
        name=record.name,
        slug=record.slug,
        description=record.description,
        owner_id=record.owner_id,
        settings=dict(record.settings or {}),
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )
    members = [
        WorkspaceMember(
            id=row.id,
            user_id=row.user_id,
            workspace_id=row.workspace_id,
            role=row.role,
            join_message=row.join_message,
            joined_at=_aware(row.joined_at),
        )
        for row in record.members
    ]
    return WorkspaceAggregate(workspace, members, [_project_entity(row) for row in projects])


def _project_entity(record: ProjectRecord) -> Project:
    return Project(
        id=record.id,
        workspace_id=record.workspace_id,
        name=record.name,
        description=record.description,
        priority=record.priority,
        status=record.status,
        start_date=_aware(record.start_date),
        end_date=_aware(record.end_date),
        team_lead_id=record.team_lead_id,
        progress=record.progress,
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )


def _project_from_record(record: ProjectRecord) -> ProjectAggregate:
    project = _project_entity(record)
    members = [
        ProjectMember(
            id=row.id,
            user_id=row.user_id,
            project_id=row.project_id,
            added_at=_aware(row.added_at),
        )
        for row in record.members
    ]
    tasks = [
        Task(
            id=row.id,
            project_id=row.project_id,
            title=row.title,
            description=row.description,
            status=row.status,
            type=row.type,
            priority=row.priority,
            assignee_id=row.assignee_id,
            due_date=_aware(row.due_date),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )
        for row in record.tasks
    ]
    return ProjectAggregate(project, members, tasks)


def _invitation_from_record(record: InvitationRecord) -> Invitation:
    return Invitation(
        id=record.id,
        email=record.email,
        token=record.token,
        type=record.type,
        workspace_id=record.workspace_id,
        project_id=record.project_id,
        invited_by_id=record.invited_by_id,
        status=record.status,
        expires_at=_aware(record.expires_at),
        created_at=_aware(record.created_at),
    )


def _apply_workspace(record: WorkspaceRecord, aggregate: WorkspaceAggregate) -> None:
    workspace = aggregate.workspace
    record.name = workspace.name
    record.slug = workspace.slug
    record.description = workspace.description
    record.owner_id = workspace.owner_id
    record.settings = dict(workspace.settings)
    record.created_at = workspace.created_at
    record.updated_at = workspace.updated_at

    # Rows are matched by user id so a remove-then-re-add in one cycle
    # updates the existing row instead of colliding on the unique key.
    wanted = {m.user_id: m for m in aggregate.members}
    for row in list(record.members):
        if row.user_id not in wanted:
            record.members.remove(row)
    existing = {row.user_id: row for row in record.members}
    for user_id, member in wanted.items():
        row = existing.get(user_id)
        if row is None:
            row = WorkspaceMemberRecord(id=member.id, user_id=user_id)
            record.members.append(row)
        row.role = member.role
        row.join_message = member.join_message
        row.joined_at = member.joined_at


def _apply_project(record: ProjectRecord, aggregate: ProjectAggregate) -> None:
    project = aggregate.project
    record.workspace_id = project.workspace_id
    record.name = project.name
    record.description = project.description
    record.priority = project.priority
    record.status = project.status
    record.start_date = project.start_date
    record.end_date = project.end_date
    record.team_lead_id = project.team_lead_id
    record.progress = project.progress
    record.created_at = project.created_at
    record.updated_at = project.updated_at

    wanted_members = {m.user_id: m for m in aggregate.members}
    for row in list(record.members):
        if row.user_id not in wanted_members:
            record.members.remove(row)
    existing_members = {row.user_id: row for row in record.members}
    for user_id, member in wanted_members.items():
        row = existing_members.get(user_id)
        if row is None:
            row = ProjectMemberRecord(id=member.id, user_id=user_id)
            record.members.append(row)
        row.added_at = member.added_at

    wanted_tasks = {t.id: t for t in aggregate.tasks}
    for row in list(record.tasks):
        if row.id not in wanted_tasks:
            record.tasks.remove(row)
    existing_tasks = {row.id: row for row in record.tasks}
    for task_id, task in wanted_tasks.items():
        row = existing_tasks.get(task_id)
        if row is None:
            row = TaskRecord(id=task_id)
            record.tasks.append(row)
        row.title = task.title
        row.description = task.description
        row.status = task.status
        row.type = task.type
        row.priority = task.priority
        row.assignee_id = task.assignee_id
        row.due_date = task.due_date
        row.created_at = task.created_at
        row.updated_at = task.updated_at


def _apply_invitation(record: InvitationRecord, invitation: Invitation) -> None:
    record.email = invitation.email
    record.token = invitation.token
    record.type = invitation.type
    record.workspace_id = invitation.workspace_id
    record.project_id = invitation.project_id
    record.invited_by_id = invitation.invited_by_id
    record.status = invitation.status
    record.expires_at = invitation.expires_at
    record.created_at = invitation.created_at


# ----------------------------------------------------------------------------
# repositories
# ----------------------------------------------------------------------------


class _SqlRepository:
    def __init__(self, session: Session):
        self.session = session

    def _commit(self, conflict_message: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Integrity violation: %s", exc.orig)
            raise ConflictError(conflict_message) from exc


class SqlWorkspaceRepository(_SqlRepository):
    def get(self, workspace_id: str) -> Optional[WorkspaceAggregate]:
        record = self.session.get(WorkspaceRecord, workspace_id)
        if record is None:
            return None
        projects = self.session.scalars(
            select(ProjectRecord)
            .where(ProjectRecord.workspace_id == workspace_id)
            .order_by(ProjectRecord.created_at)
        ).all()
        return _workspace_from_record(record, list(projects))

    def add(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        record = WorkspaceRecord(id=aggregate.id)
        _apply_workspace(record, aggregate)
        self.session.add(record)
        self._commit(f"Workspace slug '{aggregate.workspace.slug}' is already taken")
        return aggregate

    def save(self, aggregate: WorkspaceAggregate) -> WorkspaceAggregate:
        record = self.session.get(WorkspaceRecord, aggregate.id)
        if record is None:
            raise NotFoundError("Workspace", aggregate.id)
        _apply_workspace(record, aggregate)
        self._commit("Workspace membership conflict")
        return aggregate


class SqlProjectRepository(_SqlRepository):
    def get(self, project_id: str) -> Optional[ProjectAggregate]:
        record = self.session.get(ProjectRecord, project_id)
        return _project_from_record(record) if record is not None else None

    def add(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        record = ProjectRecord(id=aggregate.id)
        _apply_project(record, aggregate)
        self.session.add(record)
        self._commit(f"Project {aggregate.id} already exists")
        return aggregate

    def save(self, aggregate: ProjectAggregate) -> ProjectAggregate:
        record = self.session.get(ProjectRecord, aggregate.id)
        if record is None:
            raise NotFoundError("Project", aggregate.id)
        _apply_project(record, aggregate)
        self._commit("Project membership conflict")
        return aggregate


class SqlInvitationRepository(_SqlRepository):
    def get(self, invitation_id: str) -> Optional[Invitation]:
        record = self.session.get(InvitationRecord, invitation_id)
        return _invitation_from_record(record) if record is not None else None

    def get_by_token(self, token: str) -> Optional[Invitation]:
        record = (
            self.session.execute(
                select(InvitationRecord).where(InvitationRecord.token == token)
            )
            .scalars()
            .first()
        )
        return _invitation_from_record(record) if record is not None else None

    def find_pending(
        self,
        email: str,
        workspace_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[Invitation]:
        conditions = [
            InvitationRecord.email == email,
            InvitationRecord.status == InvitationStatus.PENDING,
        ]
        if workspace_id is not None:
            conditions.append(InvitationRecord.workspace_id == workspace_id)
        if project_id is not None:
            conditions.append(InvitationRecord.project_id == project_id)
        record = (
            self.session.execute(select(InvitationRecord).where(and_(*conditions)))
            .scalars()
            .first()
        )
        return _invitation_from_record(record) if record is not None else None

    def add(self, invitation: Invitation) -> Invitation:
        record = InvitationRecord(id=invitation.id)
        _apply_invitation(record, invitation)
        self.session.add(record)
        self._commit("User already has a pending invitation to this target")
        return invitation

    def update(self, invitation: Invitation) -> Invitation:
        record = self.session.get(InvitationRecord, invitation.id)
        if record is None:
            raise NotFoundError("Invitation", invitation.id)
        _apply_invitation(record, invitation)
        self._commit("User already has a pending invitation to this target")
        return invitation

    def list_for_workspace(self, workspace_id: str) -> list[Invitation]:
        return self._list(InvitationRecord.workspace_id == workspace_id)

    def list_for_project(self, project_id: str) -> list[Invitation]:
        return self._list(InvitationRecord.project_id == project_id)

    def list_for_email(self, email: str) -> list[Invitation]:
        return self._list(InvitationRecord.email == email)

    def _list(self, condition) -> list[Invitation]:
        stmt = (
            select(InvitationRecord)
            .where(condition)
            .order_by(InvitationRecord.created_at.desc())
        )
        return [_invitation_from_record(r) for r in self.session.execute(stmt).scalars()]
