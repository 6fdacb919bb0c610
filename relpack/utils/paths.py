# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for relpack.

Nothing in relpack changes the process working directory. Every path that
reaches a filesystem operation is made absolute here first, relative to
the project directory given on the command line.
"""

from pathlib import Path


def resolve_project_dir(project_dir: str | Path | None) -> Path:
    """
    Turn the --project-dir value into an absolute directory path.

    Args:
        project_dir: Directory holding the cargo manifest, or None for cwd.

    Returns:
        Absolute, resolved path to the project directory.

    Raises:
        NotADirectoryError: If the path exists but isn't a directory, or
            doesn't exist at all.
    """
    candidate = Path(project_dir) if project_dir is not None else Path.cwd()
    resolved = candidate.expanduser().resolve()
    if not resolved.is_dir():
        raise NotADirectoryError(f"Project directory not found: {resolved}")
    return resolved


def resolve_within(base_dir: Path, value: str | Path) -> Path:
    """
    Resolve a config path against base_dir. Absolute values pass through.

    Args:
        base_dir: Absolute directory relative paths are anchored to.
        value: A path from config or the command line.

    Returns:
        Absolute path.
    """
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it doesn't exist. Returns the path for chaining.

    Args:
        path: Directory path to create.

    Returns:
        The same path, now guaranteed to exist.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
