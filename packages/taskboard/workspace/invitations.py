"""Invitation state machine.

``PENDING`` moves to exactly one of ``ACCEPTED``, ``EXPIRED`` or ``REVOKED``;
all three are terminal. Expiry is evaluated lazily, only when the invitation
itself is accepted. There is no background sweep.
"""

from __future__ import annotations

import datetime as dt
import functools
import logging
from typing import Callable, Optional

from . import policy
from .aggregates import ProjectAggregate
from .entities import Invitation, utcnow
from .errors import (
    ConflictError,
    DomainError,
    ErrorKind,
    ExpiredError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from .repositories import InvitationRepository, ProjectRepository, WorkspaceRepository
from .result import Result
from .schema.enums import InvitationStatus, InvitationType, WorkspaceRole
from .service import WorkspaceSettings
from .tokens import TokenGenerator, generate_invitation_token

__all__ = ["Clock", "InvitationService", "normalize_email"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

Clock = Callable[[], dt.datetime]


def normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        raise ValidationError(f"Invalid email address: {email!r}")
    return normalized


class InvitationService:
    """Creates, accepts, revokes and lists invitations.

    Dependencies are passed explicitly; the service keeps no state between
    calls. Every public operation returns a :class:`Result`.
    """

    def __init__(
        self,
        workspaces: WorkspaceRepository,
        projects: ProjectRepository,
        invitations: InvitationRepository,
        settings: Optional[WorkspaceSettings] = None,
        token_generator: Optional[TokenGenerator] = None,
        clock: Clock = utcnow,
    ):
        self.workspaces = workspaces
        self.projects = projects
        self.invitations = invitations
        self.settings = settings or WorkspaceSettings()
        self.token_generator = token_generator or functools.partial(
            generate_invitation_token, self.settings.token_bytes
        )
        self.clock = clock

    # ========================================================================
    # Invite
    # ========================================================================

    def invite_to_workspace(
        self,
        workspace_id: str,
        email: str,
        invited_by_id: str,
        role: WorkspaceRole = WorkspaceRole.MEMBER,
    ) -> Result[Invitation]:
        return self.invite(InvitationType.WORKSPACE, workspace_id, email, invited_by_id, role)

    def invite_to_project(
        self, project_id: str, email: str, invited_by_id: str
    ) -> Result[Invitation]:
        return self.invite(InvitationType.PROJECT, project_id, email, invited_by_id)

    def invite(
        self,
        target_type: InvitationType,
        target_id: str,
        email: str,
        invited_by_id: str,
        role: Optional[WorkspaceRole] = None,
    ) -> Result[Invitation]:
        """Create a PENDING invitation for ``email`` to the given target.

        The requested role is not persisted: accepting a workspace invitation
        always grants MEMBER.
        """

        try:
            email = normalize_email(email)
        except ValidationError as exc:
            return Result.failure(exc)

        target_type = InvitationType(target_type)
        if target_type == InvitationType.WORKSPACE:
            workspace = self.workspaces.get(target_id)
            if workspace is None:
                return self._reject(NotFoundError("Workspace", target_id, "Workspace not found"))
            if not policy.can_manage_invitations(workspace, invited_by_id):
                return self._reject(
                    UnauthorizedError("Only workspace owners or admins can invite users")
                )
            existing = self.invitations.find_pending(email, workspace_id=target_id)
        else:
            project = self.projects.get(target_id)
            if project is None:
                return self._reject(NotFoundError("Project", target_id, "Project not found"))
            if not self._can_manage_project(project, invited_by_id):
                return self._reject(
                    UnauthorizedError(
                        "Only the project team lead or workspace owners or admins "
                        "can invite users"
                    )
                )
            existing = self.invitations.find_pending(email, project_id=target_id)

        if existing is not None:
            return self._reject(
                ConflictError(
                    f"User already has a pending invitation to this {target_type.value.lower()}"
                )
            )

        now = self.clock()
        invitation = Invitation(
            email=email,
            token=self.token_generator(),
            type=target_type,
            workspace_id=target_id if target_type == InvitationType.WORKSPACE else None,
            project_id=target_id if target_type == InvitationType.PROJECT else None,
            invited_by_id=invited_by_id,
            status=InvitationStatus.PENDING,
            expires_at=now + dt.timedelta(days=self.settings.invitation_ttl_days),
            created_at=now,
        )
        try:
            self.invitations.add(invitation)
        except DomainError as exc:
            return self._reject(exc)

        # Email delivery is not implemented; the caller shares the token.
        logger.info(
            "Invitation %s created for %s %s by %s (requested role=%s)",
            invitation.id,
            target_type.value,
            target_id,
            invited_by_id,
            role.value if role is not None else None,
        )
        return Result.success(invitation)

    # ========================================================================
    # Accept
    # ========================================================================

    def accept(self, token: str, user_id: Optional[str] = None) -> Result[Invitation]:
        """Accept an invitation by token.

        Without ``user_id`` the invitation is marked ACCEPTED and no
        membership is created. An expired invitation is moved to EXPIRED
        even though the call fails.
        """

        invitation = self.invitations.get_by_token(token)
        if invitation is None:
            return self._reject(NotFoundError("Invitation", message="Invalid invitation token"))
        if not invitation.is_pending:
            return self._reject(ConflictError("Invitation is no longer valid"))

        if invitation.is_expired(self.clock()):
            invitation.status = InvitationStatus.EXPIRED
            try:
                self.invitations.update(invitation)
            except DomainError as exc:
                return self._reject(exc)
            logger.info("Invitation %s expired on accept", invitation.id)
            return Result.failure(ExpiredError("Invitation has expired"))

        staged = None
        if user_id:
            joined = self._stage_membership(invitation, user_id)
            if not joined.ok:
                return self._reject(joined.error)  # type: ignore[arg-type]
            staged = joined.value

        invitation.status = InvitationStatus.ACCEPTED
        try:
            self.invitations.update(invitation)
        except DomainError as exc:
            return self._reject(exc)

        if staged is not None:
            repository, aggregate = staged
            try:
                repository.save(aggregate)
            except DomainError as exc:
                # Membership was not stored, so the invitation stays usable.
                invitation.status = InvitationStatus.PENDING
                self.invitations.update(invitation)
                return self._reject(exc)
            for event in aggregate.pull_events():
                logger.debug("Domain event: %r", event)

        logger.info(
            "Invitation %s accepted (user=%s, %s %s)",
            invitation.id,
            user_id,
            invitation.type.value,
            invitation.target_id,
        )
        return Result.success(invitation)

    def _stage_membership(self, invitation: Invitation, user_id: str) -> Result[Optional[tuple]]:
        """Add ``user_id`` to the target aggregate without saving it.

        Returns the ``(repository, aggregate)`` pair to save, or ``None`` when
        there is nothing to store: the target no longer exists, or the user
        already belongs to it and strict acceptance is off.
        """

        if invitation.type == InvitationType.WORKSPACE:
            workspace = self.workspaces.get(invitation.target_id)
            if workspace is None:
                logger.warning(
                    "Workspace %s is gone; accepting invitation %s without membership",
                    invitation.target_id,
                    invitation.id,
                )
                return Result.success(None)
            added = workspace.add_member(user_id, WorkspaceRole.MEMBER)
            staged: tuple = (self.workspaces, workspace)
        else:
            project = self.projects.get(invitation.target_id)
            if project is None:
                logger.warning(
                    "Project %s is gone; accepting invitation %s without membership",
                    invitation.target_id,
                    invitation.id,
                )
                return Result.success(None)
            added = project.add_member(user_id)
            staged = (self.projects, project)

        if not added.ok:
            if added.kind == ErrorKind.CONFLICT and not self.settings.strict_accept_membership:
                logger.info(
                    "User %s already belongs to %s %s; accepting without new membership",
                    user_id,
                    invitation.type.value,
                    invitation.target_id,
                )
                return Result.success(None)
            return Result.failure(added.error)  # type: ignore[arg-type]
        return Result.success(staged)

    # ========================================================================
    # Revoke
    # ========================================================================

    def revoke(self, invitation_id: str, user_id: str) -> Result[Invitation]:
        invitation = self.invitations.get(invitation_id)
        if invitation is None:
            return self._reject(NotFoundError("Invitation", invitation_id, "Invitation not found"))
        if not invitation.is_pending:
            return self._reject(ConflictError("Only pending invitations can be revoked"))

        if invitation.workspace_id is not None:
            workspace = self.workspaces.get(invitation.workspace_id)
            if workspace is not None and not policy.can_manage_invitations(workspace, user_id):
                return self._reject(
                    UnauthorizedError("Only workspace owners or admins can revoke invitations")
                )
        elif self.settings.enforce_project_revoke_authorization:
            project = self.projects.get(invitation.target_id)
            if project is not None and not self._can_manage_project(project, user_id):
                return self._reject(
                    UnauthorizedError(
                        "Only the project team lead or workspace owners or admins "
                        "can revoke invitations"
                    )
                )
        else:
            logger.info(
                "Revoking project invitation %s without an authorization check", invitation.id
            )

        invitation.status = InvitationStatus.REVOKED
        try:
            self.invitations.update(invitation)
        except DomainError as exc:
            return self._reject(exc)
        logger.info("Invitation %s revoked by %s", invitation.id, user_id)
        return Result.success(invitation)

    # ========================================================================
    # Queries
    # ========================================================================

    def list_workspace_invitations(
        self,
        workspace_id: str,
        user_id: str,
        status: Optional[InvitationStatus] = InvitationStatus.PENDING,
    ) -> Result[list[Invitation]]:
        """Invitations for a workspace, newest first; ``status=None`` lists all."""

        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            return self._reject(NotFoundError("Workspace", workspace_id, "Workspace not found"))
        if not policy.can_manage_invitations(workspace, user_id):
            return self._reject(
                UnauthorizedError("Only workspace owners or admins can view invitations")
            )
        return Result.success(
            _filter_newest_first(self.invitations.list_for_workspace(workspace_id), status)
        )

    def list_project_invitations(
        self,
        project_id: str,
        user_id: str,
        status: Optional[InvitationStatus] = InvitationStatus.PENDING,
    ) -> Result[list[Invitation]]:
        project = self.projects.get(project_id)
        if project is None:
            return self._reject(NotFoundError("Project", project_id, "Project not found"))
        if not self._can_manage_project(project, user_id):
            return self._reject(
                UnauthorizedError(
                    "Only the project team lead or workspace owners or admins "
                    "can view invitations"
                )
            )
        return Result.success(
            _filter_newest_first(self.invitations.list_for_project(project_id), status)
        )

    def list_pending_for_email(self, email: str) -> Result[list[Invitation]]:
        """Pending invitations addressed to ``email``. No authorization."""

        try:
            email = normalize_email(email)
        except ValidationError as exc:
            return Result.failure(exc)
        return Result.success(
            _filter_newest_first(self.invitations.list_for_email(email), InvitationStatus.PENDING)
        )

    # ========================================================================
    # helpers
    # ========================================================================

    def _can_manage_project(self, project: ProjectAggregate, user_id: str) -> bool:
        workspace = self.workspaces.get(project.project.workspace_id)
        return policy.can_manage_project(project, workspace, user_id)

    @staticmethod
    def _reject(error: DomainError) -> Result:
        logger.warning("Invitation operation rejected (%s): %s", error.kind.value, error.message)
        return Result.failure(error)


def _filter_newest_first(
    invitations, status: Optional[InvitationStatus]
) -> list[Invitation]:
    selected = [i for i in invitations if status is None or i.status == status]
    return sorted(selected, key=lambda i: i.created_at, reverse=True)
