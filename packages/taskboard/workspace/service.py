"""Configuration and database wiring for the workspace core."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base
from .tokens import DEFAULT_TOKEN_BYTES

__all__ = ["WorkspaceSettings", "WorkspaceDatabase", "init_engine"]

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./taskboard.db"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class WorkspaceSettings:
    """Workspace core settings."""

    database_url: str = DEFAULT_DATABASE_URL
    invitation_ttl_days: int = 7
    token_bytes: int = DEFAULT_TOKEN_BYTES
    # Off: project invitations can be revoked by anyone who knows the id.
    enforce_project_revoke_authorization: bool = False
    # Off: accepting as an existing member succeeds without a new row.
    strict_accept_membership: bool = False

    def __post_init__(self) -> None:
        if self.invitation_ttl_days <= 0:
            raise ValueError("invitation_ttl_days must be positive")
        if self.token_bytes <= 0:
            raise ValueError("token_bytes must be positive")

    @classmethod
    def from_env(cls, env_file: str | None = None) -> WorkspaceSettings:
        """Build settings from the environment.

        Variables from ``env_file`` (or the nearest ``.env`` above the working
        directory) fill in anything not already set.
        """

        dotenv_path = env_file or find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path, override=False)
        database_url = (
            os.getenv("TASKBOARD_DB_URL")
            or os.getenv("DATABASE_URL")
            or DEFAULT_DATABASE_URL
        )
        return cls(
            database_url=database_url,
            invitation_ttl_days=int(os.getenv("TASKBOARD_INVITATION_TTL_DAYS", "7")),
            token_bytes=int(os.getenv("TASKBOARD_TOKEN_BYTES", str(DEFAULT_TOKEN_BYTES))),
            enforce_project_revoke_authorization=_env_flag(
                "TASKBOARD_ENFORCE_PROJECT_REVOKE_AUTH"
            ),
            strict_accept_membership=_env_flag("TASKBOARD_STRICT_ACCEPT_MEMBERSHIP"),
        )


def init_engine(settings: WorkspaceSettings) -> Engine:
    """Create an SQLAlchemy engine with sensible defaults."""

    database_url = settings.database_url
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+psycopg://", 1)
    elif database_url.startswith("postgresql://") and "+psycopg" not in database_url:
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)

    engine_kwargs: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in {"sqlite://", "sqlite+pysqlite://"}:
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **engine_kwargs)


class WorkspaceDatabase:
    """Session factory wrapper."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def session(self) -> Session:
        return self._session_factory()

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)
