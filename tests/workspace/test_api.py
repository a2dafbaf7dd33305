from __future__ import annotations

import importlib
import warnings

from fastapi.testclient import TestClient

from packages.taskboard.workspace import api
from packages.taskboard.workspace.api import ERROR_STATUS, create_app
from packages.taskboard.workspace.errors import ErrorKind
from packages.taskboard.workspace.service import WorkspaceSettings

OWNER = {"X-User-ID": "owner-1"}
ADMIN = {"X-User-ID": "admin-1"}
OUTSIDER = {"X-User-ID": "outsider-1"}


def _create_client() -> TestClient:
    settings = WorkspaceSettings(database_url="sqlite+pysqlite:///:memory:")
    return TestClient(create_app(settings))


def _create_workspace(client: TestClient) -> str:
    response = client.post(
        "/api/v1/workspaces",
        json={"name": "Acme", "slug": "acme", "description": "Main tenant"},
        headers=OWNER,
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _invite(client: TestClient, workspace_id: str, email: str = "a@example.com"):
    return client.post(
        "/api/v1/invitations/workspace",
        json={"workspaceId": workspace_id, "email": email, "role": "MEMBER"},
        headers=OWNER,
    )


def test_invitation_flow_round_trip() -> None:
    client = _create_client()
    workspace_id = _create_workspace(client)

    created = _invite(client, workspace_id)
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["message"] == "Invitation sent successfully"
    invitation = body["data"]
    assert invitation["status"] == "PENDING"
    assert invitation["type"] == "WORKSPACE"
    assert invitation["workspaceId"] == workspace_id
    assert invitation["projectId"] is None
    assert invitation["invitedById"] == "owner-1"
    assert {"expiresAt", "createdAt", "token", "email", "id"} <= set(invitation)

    pending = client.get("/api/v1/invitations/pending", params={"email": "a@example.com"})
    assert pending.status_code == 200
    assert [i["id"] for i in pending.json()["data"]] == [invitation["id"]]

    accepted = client.post(
        f"/api/v1/invitations/accept/{invitation['token']}",
        headers={"X-User-ID": "new-user"},
    )
    assert accepted.status_code == 200
    assert accepted.json()["data"]["status"] == "ACCEPTED"

    workspace = client.get(f"/api/v1/workspaces/{workspace_id}", headers={"X-User-ID": "new-user"})
    assert workspace.status_code == 200
    members = workspace.json()["data"]["members"]
    assert [(m["userId"], m["role"]) for m in members] == [("new-user", "MEMBER")]

    again = client.post(f"/api/v1/invitations/accept/{invitation['token']}")
    assert again.status_code == 409
    assert again.json() == {
        "success": False,
        "message": "Invitation is no longer valid",
        "error": "conflict",
    }


def test_duplicate_invite_and_revoke() -> None:
    client = _create_client()
    workspace_id = _create_workspace(client)
    invitation = _invite(client, workspace_id).json()["data"]

    duplicate = _invite(client, workspace_id, email="A@Example.com")
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    forbidden = client.post(f"/api/v1/invitations/revoke/{invitation['id']}", headers=OUTSIDER)
    assert forbidden.status_code == 403

    revoked = client.post(f"/api/v1/invitations/revoke/{invitation['id']}", headers=OWNER)
    assert revoked.status_code == 200
    assert revoked.json()["message"] == "Invitation revoked successfully"

    listing = client.get(
        f"/api/v1/invitations/workspace/{workspace_id}", params={"status": "ALL"}, headers=OWNER
    )
    assert listing.status_code == 200
    assert [i["status"] for i in listing.json()["data"]] == ["REVOKED"]
    assert listing.json()["message"] == "Retrieved 1 invitation(s)"

    pending_only = client.get(f"/api/v1/invitations/workspace/{workspace_id}", headers=OWNER)
    assert pending_only.json()["data"] == []


def test_project_invitation_via_api() -> None:
    client = _create_client()
    workspace_id = _create_workspace(client)
    project = client.post(
        f"/api/v1/workspaces/{workspace_id}/projects",
        json={"name": "Launch", "priority": "HIGH", "teamLeadId": "lead-1"},
        headers=OWNER,
    )
    assert project.status_code == 201
    project_data = project.json()["data"]
    assert project_data["teamLeadId"] == "lead-1"
    assert project_data["statistics"]["total"] == 0

    invited = client.post(
        "/api/v1/invitations/project",
        json={"projectId": project_data["id"], "email": "dev@example.com"},
        headers={"X-User-ID": "lead-1"},
    )
    assert invited.status_code == 201
    token = invited.json()["data"]["token"]

    listed = client.get(
        f"/api/v1/invitations/project/{project_data['id']}", headers={"X-User-ID": "lead-1"}
    )
    assert len(listed.json()["data"]) == 1

    assert client.post(
        f"/api/v1/invitations/accept/{token}", headers={"X-User-ID": "dev-1"}
    ).status_code == 200
    fetched = client.get(f"/api/v1/projects/{project_data['id']}", headers={"X-User-ID": "dev-1"})
    assert [m["userId"] for m in fetched.json()["data"]["members"]] == ["dev-1"]


def test_error_mapping() -> None:
    client = _create_client()
    workspace_id = _create_workspace(client)

    assert client.post(
        "/api/v1/invitations/workspace",
        json={"workspaceId": workspace_id, "email": "a@example.com"},
    ).status_code == 401

    unauthorized = client.post(
        "/api/v1/invitations/workspace",
        json={"workspaceId": workspace_id, "email": "a@example.com"},
        headers=OUTSIDER,
    )
    assert unauthorized.status_code == 403
    assert unauthorized.json()["error"] == "unauthorized"

    missing = client.post("/api/v1/invitations/accept/not-a-token")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Invalid invitation token"

    no_email = client.get("/api/v1/invitations/pending")
    assert no_email.status_code == 400
    assert no_email.json()["message"] == "Email is required"

    bad_status = client.get(
        f"/api/v1/invitations/workspace/{workspace_id}", params={"status": "bogus"}, headers=OWNER
    )
    assert bad_status.status_code == 400

    taken = client.post(
        "/api/v1/workspaces", json={"name": "Again", "slug": "acme"}, headers=ADMIN
    )
    assert taken.status_code == 409

    invalid_email = client.post(
        "/api/v1/invitations/workspace",
        json={"workspaceId": workspace_id, "email": "not-an-email"},
        headers=OWNER,
    )
    assert invalid_email.status_code == 422


def test_error_status_table_covers_every_kind() -> None:
    assert set(ERROR_STATUS) == set(ErrorKind)
    assert ERROR_STATUS[ErrorKind.BUSINESS_RULE_VIOLATION] == 422


def test_api_module_imports_without_deprecation_warnings() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.reload(api)
