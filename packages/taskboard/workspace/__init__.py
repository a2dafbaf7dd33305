"""Workspace membership, invitations and their persistence."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    # Domain
    "Invitation": ".entities",
    "Project": ".entities",
    "Task": ".entities",
    "Workspace": ".entities",
    "WorkspaceAggregate": ".aggregates",
    "ProjectAggregate": ".aggregates",
    "DomainError": ".errors",
    "ErrorKind": ".errors",
    "Result": ".result",
    # Services
    "InvitationService": ".invitations",
    "MembershipService": ".membership",
    "generate_invitation_token": ".tokens",
    # Wiring
    "WorkspaceSettings": ".service",
    "WorkspaceDatabase": ".service",
    "init_engine": ".service",
    "create_app": ".api",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:  # pragma: no cover - thin import shim
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    value = getattr(import_module(module_name, __name__), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:  # pragma: no cover - introspection helper
    return sorted(__all__ + ["schema"])
