import datetime as dt
from pathlib import Path

import pytest

from packages.taskboard.workspace.entities import Invitation, Task
from packages.taskboard.workspace.errors import ConflictError, ErrorKind, NotFoundError
from packages.taskboard.workspace.invitations import InvitationService
from packages.taskboard.workspace.repositories import (
    InvitationRepository,
    ProjectRepository,
    SqlInvitationRepository,
    SqlProjectRepository,
    SqlWorkspaceRepository,
    WorkspaceRepository,
)
from packages.taskboard.workspace.schema.enums import (
    InvitationStatus,
    InvitationType,
    TaskStatus,
    WorkspaceRole,
)
from packages.taskboard.workspace.service import WorkspaceDatabase, WorkspaceSettings, init_engine


@pytest.fixture()
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "taskboard.db"


def _build_repositories(db_path: Path):
    settings = WorkspaceSettings(database_url=f"sqlite:///{db_path}")
    engine = init_engine(settings)
    database = WorkspaceDatabase(engine)
    database.create_all()
    session = database.session()

    repos = (
        SqlWorkspaceRepository(session),
        SqlProjectRepository(session),
        SqlInvitationRepository(session),
    )

    def _teardown():
        session.close()
        engine.dispose()

    return repos, database, _teardown


def _pending(email: str, token: str, created_at: dt.datetime, **target) -> Invitation:
    return Invitation(
        email=email,
        token=token,
        type=InvitationType.WORKSPACE if "workspace_id" in target else InvitationType.PROJECT,
        invited_by_id="owner-1",
        expires_at=created_at + dt.timedelta(days=7),
        created_at=created_at,
        **target,
    )


def test_sql_repositories_satisfy_protocols(temp_db_path):
    (workspaces, projects, invitations), _, cleanup = _build_repositories(temp_db_path)
    try:
        assert isinstance(workspaces, WorkspaceRepository)
        assert isinstance(projects, ProjectRepository)
        assert isinstance(invitations, InvitationRepository)
    finally:
        cleanup()


def test_workspace_round_trip_keeps_members(temp_db_path, make_workspace):
    (workspaces, _, _), database, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())

        # A fresh session proves the data came from the database.
        reloaded = SqlWorkspaceRepository(database.session()).get("w1")

        assert reloaded.workspace.slug == "acme"
        assert reloaded.workspace.created_at.tzinfo is not None
        assert {m.user_id: m.role for m in reloaded.members} == {
            "admin-1": WorkspaceRole.ADMIN,
            "member-1": WorkspaceRole.MEMBER,
        }
        assert reloaded.member("owner-1") is None
    finally:
        cleanup()


def test_workspace_save_syncs_member_rows(temp_db_path, make_workspace):
    (workspaces, _, _), database, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        aggregate = workspaces.get("w1")
        aggregate.remove_member("member-1").unwrap()
        aggregate.add_member("new-user").unwrap()
        aggregate.change_member_role("admin-1", WorkspaceRole.MEMBER).unwrap()
        workspaces.save(aggregate)

        reloaded = SqlWorkspaceRepository(database.session()).get("w1")

        assert {m.user_id: m.role for m in reloaded.members} == {
            "admin-1": WorkspaceRole.MEMBER,
            "new-user": WorkspaceRole.MEMBER,
        }
    finally:
        cleanup()


def test_duplicate_slug_is_conflict(temp_db_path, make_workspace):
    (workspaces, _, _), _, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())

        with pytest.raises(ConflictError):
            workspaces.add(make_workspace(workspace_id="w2", slug="acme"))
        assert workspaces.get("w2") is None
    finally:
        cleanup()


def test_save_missing_workspace_is_not_found(temp_db_path, make_workspace):
    (workspaces, _, _), _, cleanup = _build_repositories(temp_db_path)
    try:
        with pytest.raises(NotFoundError):
            workspaces.save(make_workspace())
    finally:
        cleanup()


def test_project_round_trip_keeps_tasks_and_progress(temp_db_path, make_workspace, make_project):
    (workspaces, projects, _), database, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        aggregate = make_project()
        aggregate.add_member("dev-1").unwrap()
        aggregate.add_task(Task(project_id="p1", title="Design", status=TaskStatus.DONE)).unwrap()
        aggregate.add_task(Task(project_id="p1", title="Build")).unwrap()
        aggregate.add_task(Task(project_id="p1", title="Ship")).unwrap()
        projects.add(aggregate)

        reloaded = SqlProjectRepository(database.session()).get("p1")

        assert reloaded.project.progress == 33
        assert reloaded.project.team_lead_id == "lead-1"
        assert reloaded.member("dev-1") is not None
        assert sorted(t.title for t in reloaded.tasks) == ["Build", "Design", "Ship"]
        assert reloaded.task_statistics().done == 1
    finally:
        cleanup()


def test_workspace_loads_its_projects(temp_db_path, make_workspace, make_project):
    (workspaces, projects, _), database, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        projects.add(make_project())
        workspaces.add(make_workspace("w2", slug="other"))
        projects.add(make_project("p2", workspace_id="w2"))

        reloaded = SqlWorkspaceRepository(database.session()).get("w1")

        assert [p.id for p in reloaded.projects] == ["p1"]
        assert reloaded.projects[0].team_lead_id == "lead-1"
        assert reloaded.add_project(reloaded.projects[0]).kind is ErrorKind.CONFLICT
    finally:
        cleanup()


def test_partial_index_allows_one_pending_per_target(temp_db_path, make_workspace, make_project):
    (workspaces, projects, invitations), _, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        projects.add(make_project())
        now = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)

        first = invitations.add(_pending("a@x.com", "t1", now, workspace_id="w1"))
        invitations.add(_pending("a@x.com", "t2", now, project_id="p1"))

        with pytest.raises(ConflictError):
            invitations.add(_pending("a@x.com", "t3", now, workspace_id="w1"))

        first.status = InvitationStatus.REVOKED
        invitations.update(first)
        invitations.add(_pending("a@x.com", "t4", now, workspace_id="w1"))

        assert len(invitations.list_for_workspace("w1")) == 2
    finally:
        cleanup()


def test_invitation_queries_order_newest_first(temp_db_path, make_workspace):
    (workspaces, _, invitations), _, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        base = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
        older = invitations.add(_pending("a@x.com", "t1", base, workspace_id="w1"))
        newer = invitations.add(
            _pending("b@x.com", "t2", base + dt.timedelta(hours=1), workspace_id="w1")
        )

        listed = invitations.list_for_workspace("w1")

        assert [i.id for i in listed] == [newer.id, older.id]
        assert invitations.get_by_token("t2").email == "b@x.com"
        assert invitations.find_pending("a@x.com", workspace_id="w1").id == older.id
        assert invitations.find_pending("a@x.com", project_id="p1") is None
        assert invitations.list_for_email("b@x.com")[0].expires_at.tzinfo is not None
    finally:
        cleanup()


def test_invitation_flow_against_sqlite(temp_db_path, make_workspace):
    (workspaces, projects, invitations), database, cleanup = _build_repositories(temp_db_path)
    try:
        workspaces.add(make_workspace())
        service = InvitationService(
            workspaces,
            projects,
            invitations,
            settings=WorkspaceSettings(database_url=f"sqlite:///{temp_db_path}"),
        )

        invitation = service.invite_to_workspace("w1", "new@x.com", "owner-1").unwrap()
        assert service.invite_to_workspace("w1", "new@x.com", "owner-1").kind is ErrorKind.CONFLICT
        service.accept(invitation.token, "new-user").unwrap()

        fresh = SqlWorkspaceRepository(database.session())
        assert fresh.get("w1").member("new-user").role is WorkspaceRole.MEMBER
        stored = SqlInvitationRepository(database.session()).get(invitation.id)
        assert stored.status is InvitationStatus.ACCEPTED
    finally:
        cleanup()
