"""FastAPI application for workspace membership and invitations.

- Invitations: invite, accept, revoke, list (``/api/v1/invitations``)
- Workspaces and projects: create and read (``/api/v1/workspaces``, ``/api/v1/projects``)

The caller is identified by the ``X-User-ID`` header.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import schemas
from .errors import DomainError, ErrorKind, ValidationError
from .invitations import InvitationService
from .membership import MembershipService
from .repositories import SqlInvitationRepository, SqlProjectRepository, SqlWorkspaceRepository
from .schema.enums import InvitationStatus
from .service import WorkspaceDatabase, WorkspaceSettings, init_engine

__all__ = ["create_app", "ERROR_STATUS", "WorkspaceSettings"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.EXPIRED: status.HTTP_410_GONE,
    # literal: the 422 constant name differs between Starlette releases
    ErrorKind.BUSINESS_RULE_VIOLATION: 422,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}

ALL_STATUSES = "ALL"


def _parse_status(raw: Optional[str]) -> Optional[InvitationStatus]:
    if raw is None or raw.upper() == ALL_STATUSES:
        return None
    try:
        return InvitationStatus(raw.upper())
    except ValueError:
        raise ValidationError(f"Unknown invitation status: {raw}") from None


def create_app(settings: WorkspaceSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or WorkspaceSettings.from_env()
    engine = init_engine(settings)
    database = WorkspaceDatabase(engine=engine)
    database.create_all()

    app = FastAPI(
        title="Taskboard Workspace API",
        version="1.0.0",
        description="Workspace and project membership with invitations",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_session() -> Generator[Session, None, None]:
        session = database.session()
        try:
            yield session
        finally:
            session.close()

    def get_invitation_service(session: Session = Depends(get_session)) -> InvitationService:
        return InvitationService(
            workspaces=SqlWorkspaceRepository(session),
            projects=SqlProjectRepository(session),
            invitations=SqlInvitationRepository(session),
            settings=settings,
        )

    def get_membership_service(session: Session = Depends(get_session)) -> MembershipService:
        return MembershipService(
            workspaces=SqlWorkspaceRepository(session),
            projects=SqlProjectRepository(session),
        )

    def get_current_user(request: Request) -> str:
        # JWT verification happens upstream; only the resolved id is forwarded.
        user_id = request.headers.get("X-User-ID")
        if not user_id:
            raise HTTPException(status_code=401, detail="Authentication required")
        return user_id

    def get_optional_user(request: Request) -> Optional[str]:
        return request.headers.get("X-User-ID") or None

    @app.exception_handler(DomainError)
    async def _handle_domain_error(request: Request, exc: DomainError):
        return JSONResponse(
            status_code=ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST),
            content={"success": False, "message": exc.message, "error": exc.kind.value},
        )

    # ========================================================================
    # Invitations
    # ========================================================================

    @app.post(
        "/api/v1/invitations/workspace",
        response_model=schemas.ApiResponse[schemas.InvitationResponse],
        status_code=201,
    )
    def invite_to_workspace(
        request: schemas.InviteToWorkspaceRequest,
        service: InvitationService = Depends(get_invitation_service),
        user_id: str = Depends(get_current_user),
    ):
        invitation = service.invite_to_workspace(
            request.workspace_id, request.email, user_id, request.role
        ).unwrap()
        return schemas.ApiResponse(
            data=schemas.InvitationResponse.model_validate(invitation),
            message="Invitation sent successfully",
        )

    @app.post(
        "/api/v1/invitations/project",
        response_model=schemas.ApiResponse[schemas.InvitationResponse],
        status_code=201,
    )
    def invite_to_project(
        request: schemas.InviteToProjectRequest,
        service: InvitationService = Depends(get_invitation_service),
        user_id: str = Depends(get_current_user),
    ):
        invitation = service.invite_to_project(
            request.project_id, request.email, user_id
        ).unwrap()
        return schemas.ApiResponse(
            data=schemas.InvitationResponse.model_validate(invitation),
            message="Invitation sent successfully",
        )

    @app.post(
        "/api/v1/invitations/accept/{token}",
        response_model=schemas.ApiResponse[schemas.InvitationResponse],
    )
    def accept_invitation(
        token: str,
        service: InvitationService = Depends(get_invitation_service),
        user_id: Optional[str] = Depends(get_optional_user),
    ):
        invitation = service.accept(token, user_id).unwrap()
        return schemas.ApiResponse(
            data=schemas.InvitationResponse.model_validate(invitation),
            message="Invitation accepted successfully",
        )

    @app.post("/api/v1/invitations/revoke/{invitation_id}", response_model=schemas.ApiResponse[None])
    def revoke_invitation(
        invitation_id: str,
        service: InvitationService = Depends(get_invitation_service),
        user_id: str = Depends(get_current_user),
    ):
        service.revoke(invitation_id, user_id).unwrap()
        return schemas.ApiResponse(message="Invitation revoked successfully")

    @app.get(
        "/api/v1/invitations/workspace/{workspace_id}",
        response_model=schemas.ApiResponse[list[schemas.InvitationResponse]],
    )
    def list_workspace_invitations(
        workspace_id: str,
        status_filter: Optional[str] = Query(InvitationStatus.PENDING.value, alias="status"),
        service: InvitationService = Depends(get_invitation_service),
        user_id: str = Depends(get_current_user),
    ):
        invitations = service.list_workspace_invitations(
            workspace_id, user_id, _parse_status(status_filter)
        ).unwrap()
        return schemas.ApiResponse(
            data=[schemas.InvitationResponse.model_validate(i) for i in invitations],
            message=f"Retrieved {len(invitations)} invitation(s)",
        )

    @app.get(
        "/api/v1/invitations/project/{project_id}",
        response_model=schemas.ApiResponse[list[schemas.InvitationResponse]],
    )
    def list_project_invitations(
        project_id: str,
        status_filter: Optional[str] = Query(InvitationStatus.PENDING.value, alias="status"),
        service: InvitationService = Depends(get_invitation_service),
        user_id: str = Depends(get_current_user),
    ):
        invitations = service.list_project_invitations(
            project_id, user_id, _parse_status(status_filter)
        ).unwrap()
        return schemas.ApiResponse(
            data=[schemas.InvitationResponse.model_validate(i) for i in invitations],
            message=f"Retrieved {len(invitations)} invitation(s)",
        )

    @app.get(
        "/api/v1/invitations/pending",
        response_model=schemas.ApiResponse[list[schemas.InvitationResponse]],
    )
    def list_pending_invitations(
        email: Optional[str] = Query(None),
        service: InvitationService = Depends(get_invitation_service),
    ):
        if not email:
            raise ValidationError("Email is required")
        invitations = service.list_pending_for_email(email).unwrap()
        return schemas.ApiResponse(
            data=[schemas.InvitationResponse.model_validate(i) for i in invitations],
            message=f"Retrieved {len(invitations)} pending invitation(s)",
        )

    # ========================================================================
    # Workspaces and projects
    # ========================================================================

    @app.post(
        "/api/v1/workspaces",
        response_model=schemas.ApiResponse[schemas.WorkspaceResponse],
        status_code=201,
    )
    def create_workspace(
        request: schemas.WorkspaceCreateRequest,
        service: MembershipService = Depends(get_membership_service),
        user_id: str = Depends(get_current_user),
    ):
        workspace = service.create_workspace(
            request.name, request.slug, user_id, request.description
        ).unwrap()
        return schemas.ApiResponse(
            data=schemas.WorkspaceResponse.from_aggregate(workspace),
            message="Workspace created successfully",
        )

    @app.get(
        "/api/v1/workspaces/{workspace_id}",
        response_model=schemas.ApiResponse[schemas.WorkspaceResponse],
    )
    def get_workspace(
        workspace_id: str,
        service: MembershipService = Depends(get_membership_service),
        user_id: str = Depends(get_current_user),
    ):
        workspace = service.get_workspace(workspace_id, user_id).unwrap()
        return schemas.ApiResponse(data=schemas.WorkspaceResponse.from_aggregate(workspace))

    @app.post(
        "/api/v1/workspaces/{workspace_id}/projects",
        response_model=schemas.ApiResponse[schemas.ProjectResponse],
        status_code=201,
    )
    def create_project(
        workspace_id: str,
        request: schemas.ProjectCreateRequest,
        service: MembershipService = Depends(get_membership_service),
        user_id: str = Depends(get_current_user),
    ):
        project = service.create_project(
            workspace_id,
            request.name,
            user_id,
            description=request.description,
            priority=request.priority,
            team_lead_id=request.team_lead_id,
            start_date=request.start_date,
            end_date=request.end_date,
        ).unwrap()
        return schemas.ApiResponse(
            data=schemas.ProjectResponse.from_aggregate(project),
            message="Project created successfully",
        )

    @app.get(
        "/api/v1/projects/{project_id}",
        response_model=schemas.ApiResponse[schemas.ProjectResponse],
    )
    def get_project(
        project_id: str,
        service: MembershipService = Depends(get_membership_service),
        user_id: str = Depends(get_current_user),
    ):
        project = service.get_project(project_id, user_id).unwrap()
        return schemas.ApiResponse(data=schemas.ProjectResponse.from_aggregate(project))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
