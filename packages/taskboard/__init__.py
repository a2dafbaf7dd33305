"""Workspace and project membership core for taskboard."""

__all__ = ["workspace"]
