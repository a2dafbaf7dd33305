"""Top-level namespace for the taskboard Python packages."""
