"""Shared fixtures for the workspace test suite.

Seeded data uses these user ids: ``owner-1`` owns workspace ``w1``,
``admin-1`` is an ADMIN row, ``member-1`` a MEMBER row and ``lead-1`` leads
project ``p1``.
"""

from __future__ import annotations

import datetime as dt

import pytest

from packages.taskboard.workspace.aggregates import ProjectAggregate, WorkspaceAggregate
from packages.taskboard.workspace.entities import Project, Workspace
from packages.taskboard.workspace.repositories import (
    InMemoryInvitationRepository,
    InMemoryProjectRepository,
    InMemoryWorkspaceRepository,
)
from packages.taskboard.workspace.schema.enums import WorkspaceRole


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: dt.datetime):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


def _build_workspace(workspace_id: str = "w1", slug: str = "acme") -> WorkspaceAggregate:
    aggregate = WorkspaceAggregate(
        Workspace(id=workspace_id, name="Acme", slug=slug, owner_id="owner-1")
    )
    aggregate.add_member("admin-1", WorkspaceRole.ADMIN).unwrap()
    aggregate.add_member("member-1").unwrap()
    aggregate.pull_events()
    return aggregate


def _build_project(project_id: str = "p1", workspace_id: str = "w1") -> ProjectAggregate:
    return ProjectAggregate(
        Project(id=project_id, name="Launch", workspace_id=workspace_id, team_lead_id="lead-1")
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.timezone.utc))


@pytest.fixture()
def make_workspace():
    return _build_workspace


@pytest.fixture()
def make_project():
    return _build_project


@pytest.fixture()
def workspaces() -> InMemoryWorkspaceRepository:
    return InMemoryWorkspaceRepository()


@pytest.fixture()
def projects() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture()
def invitations() -> InMemoryInvitationRepository:
    return InMemoryInvitationRepository()


@pytest.fixture()
def seeded(workspaces, projects):
    """Store workspace ``w1`` and project ``p1`` in the in-memory repositories."""

    workspace, project = _build_workspace(), _build_project()
    workspace.add_project(project.project).unwrap()
    workspaces.add(workspace)
    projects.add(project)
    return workspaces, projects
