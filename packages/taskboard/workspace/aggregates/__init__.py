"""Workspace and project aggregates."""

from .project import ProjectAggregate, TaskStatistics, calculate_progress
from .workspace import WorkspaceAggregate

__all__ = [
    "WorkspaceAggregate",
    "ProjectAggregate",
    "TaskStatistics",
    "calculate_progress",
]
