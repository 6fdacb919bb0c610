# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for relpack.

Release outputs are never written in place. Content goes to a temporary
file in the same directory as the target and is then renamed over it.
Rename on the same filesystem is atomic on POSIX, so a crash mid-write
leaves a stray temp file behind instead of a truncated archive or a
half-written checksum file. It also means a rerun overwrites the previous
output rather than appending to it.
"""

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

TEMP_PREFIX = ".relpack_tmp_"
TEMP_SUFFIX = ".tmp"
DEFAULT_FILE_MODE = 0o644


@contextmanager
def staged_output(target_path: Path, mode: int = DEFAULT_FILE_MODE) -> Iterator[Path]:
    """
    Yield a temporary path next to target_path and move it into place on success.

    The caller writes whatever it wants to the yielded path. If the block
    exits normally the temp file replaces target_path. If it raises, the
    temp file is removed and target_path is left untouched.

    Args:
        target_path: Where the finished file should end up.
        mode: Permission bits for the finished file. mkstemp creates 0o600.

    Yields:
        Path to a fresh, empty temporary file in the target's directory.

    Raises:
        OSError: If the temp file can't be created or the rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        dir=str(target_path.parent),
        prefix=TEMP_PREFIX,
        suffix=TEMP_SUFFIX,
    )
    os.close(fd)
    temp_path = Path(temp_name)

    try:
        yield temp_path
        os.chmod(temp_path, mode)
        temp_path.replace(target_path)
    except BaseException:
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text content to a file atomically.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    with staged_output(target_path) as temp_path:
        # Line endings are written exactly as given, on every platform.
        with open(temp_path, "w", encoding=encoding, newline="") as handle:
            handle.write(content)


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Args:
        file_path: Path to the file to delete.

    Returns:
        True if the file existed and was deleted, False if it didn't exist.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False
