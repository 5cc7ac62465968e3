"""Workspace folders, backup file paths and metrics endpoints of components."""

from __future__ import annotations

import os
from pathlib import Path

from metawatch.session import Session

METRICS_PORT = 9091


def check_is_dir_or_create(path: str | os.PathLike[str]) -> bool:
    """Make sure ``path`` is a directory; return whether it already existed.

    A missing directory is created. An existing non-directory raises
    ``NotADirectoryError``.
    """
    target = Path(path)
    if not target.exists():
        target.mkdir()
        return False
    if not target.is_dir():
        raise NotADirectoryError(f"{target} is not a folder")
    return True


def check_file(path: str | os.PathLike[str]) -> None:
    """Check that ``path`` exists and is not a directory."""
    os.stat(path)
    if os.path.isdir(path):
        raise IsADirectoryError(f"{path} is a folder")


def create_workspace_folder(workspace_path: str | os.PathLike[str], name: str) -> str:
    """Create a new workspace ``name`` under ``workspace_path``; return its path.

    The workspace root is created if needed. A workspace that already exists
    raises ``FileExistsError``.
    """
    check_is_dir_or_create(workspace_path)
    work_path = os.path.join(os.fspath(workspace_path), name)
    if check_is_dir_or_create(work_path):
        raise FileExistsError(f"{work_path} already exists!")
    return work_path


def expand_backup_path(arg: str) -> str:
    """Expand a leading "~" to the home folder and check the backup file exists.

    Returns the expanded path. "~user" forms cannot be expanded and raise
    ``ValueError``.
    """
    if arg.startswith("~"):
        if len(arg) > 1 and arg[1] not in "/\\":
            raise ValueError("cannot expand user-specific home dir")
        home = os.path.expanduser("~")
        if home == "~":
            raise ValueError("path contains tilde, but cannot find home folder")
        arg = home + arg[1:]
    check_file(arg)
    return arg


def metrics_urls(session: Session) -> tuple[str, str]:
    """Return the metrics and default-metrics URLs of a component."""
    host = session.address.split(":")[0]
    base = f"http://{host}:{METRICS_PORT}"
    return f"{base}/metrics", f"{base}/metrics_default"