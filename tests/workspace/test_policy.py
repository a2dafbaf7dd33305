import pytest

from packages.taskboard.workspace import policy


@pytest.mark.parametrize(
    "user_id, expected",
    [("owner-1", True), ("admin-1", True), ("member-1", False), ("outsider-1", False)],
)
def test_can_manage_invitations(make_workspace, user_id, expected):
    assert policy.can_manage_invitations(make_workspace(), user_id) is expected


def test_owner_counts_as_admin_and_member(make_workspace):
    workspace = make_workspace()

    assert policy.is_owner(workspace, "owner-1")
    assert policy.is_admin(workspace, "owner-1")
    assert policy.is_workspace_member(workspace, "owner-1")
    assert policy.is_workspace_member(workspace, "member-1")
    assert not policy.is_workspace_member(workspace, "outsider-1")


def test_team_lead_is_project_member_without_row(make_project):
    project = make_project()

    assert project.member("lead-1") is None
    assert policy.is_team_lead(project, "lead-1")
    assert policy.is_project_member(project, "lead-1")
    assert not policy.is_project_member(project, "member-1")


def test_project_without_lead_has_no_team_lead(make_project):
    project = make_project()
    project.project.team_lead_id = None

    assert not policy.is_team_lead(project, "lead-1")


@pytest.mark.parametrize(
    "user_id, expected",
    [("lead-1", True), ("owner-1", True), ("admin-1", True), ("member-1", False)],
)
def test_can_manage_project(make_workspace, make_project, user_id, expected):
    assert policy.can_manage_project(make_project(), make_workspace(), user_id) is expected


def test_can_manage_project_without_workspace_falls_back_to_lead(make_project):
    project = make_project()

    assert policy.can_manage_project(project, None, "lead-1")
    assert not policy.can_manage_project(project, None, "owner-1")
