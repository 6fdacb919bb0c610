# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Deterministic zip and tar.xz archive creation.

Two runs over the same input bytes produce the same archive bytes, and so
the same checksum. To get there every piece of metadata an archiver would
normally take from the filesystem is pinned:

  - members are written in sorted order, flat at the archive root
  - every member gets the same mtime (SOURCE_DATE_EPOCH)
  - owner is uid/gid 0 with empty user/group names
  - permissions are normalised to 0o755 (executables) or 0o644

Archives are built in a temp file next to the destination and renamed
into place, so an interrupted run never leaves a truncated archive under
the final name.
"""

import lzma
import os
import stat
import tarfile
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from relpack.config.schema import MAX_SOURCE_DATE_EPOCH
from relpack.logging.logger import get_logger
from relpack.release.exceptions import ArchiveError
from relpack.release.platform.targets import ArchiveFormat
from relpack.utils.filesystem import staged_output

logger = get_logger(__name__)

SOURCE_DATE_EPOCH_ENV = "SOURCE_DATE_EPOCH"

EXECUTABLE_MODE = 0o755
REGULAR_MODE = 0o644

# Zip timestamps can't go below 1980-01-01.
_ZIP_MIN_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_READ_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class ArchiveMember:
    """One file to put in the archive."""

    source: Path
    arcname: str
    executable: bool = False

    @property
    def mode(self) -> int:
        return EXECUTABLE_MODE if self.executable else REGULAR_MODE


def resolve_source_date_epoch(configured: int) -> int:
    """
    Pick the timestamp stamped on archive members.

    The SOURCE_DATE_EPOCH environment variable wins over the configured
    value. An unparsable or out-of-range env value is an error rather than
    something to quietly ignore.
    """
    raw = os.environ.get(SOURCE_DATE_EPOCH_ENV)
    if raw is None or not raw.strip():
        return configured
    try:
        value = int(raw.strip())
    except ValueError as err:
        raise ArchiveError(f"{SOURCE_DATE_EPOCH_ENV} must be an integer, got {raw!r}") from err
    _check_epoch(value, SOURCE_DATE_EPOCH_ENV)
    return value


def _check_epoch(epoch: int, source: str) -> None:
    if not 0 <= epoch <= MAX_SOURCE_DATE_EPOCH:
        raise ArchiveError(
            f"{source} must be between 0 and {MAX_SOURCE_DATE_EPOCH} (end of 2107), got {epoch}"
        )


def _zip_date_time(epoch: int) -> tuple[int, int, int, int, int, int]:
    date_time = time.gmtime(epoch)[:6]
    return max(date_time, _ZIP_MIN_DATE_TIME)  # type: ignore[return-value]


def _check_members(members: Sequence[ArchiveMember]) -> list[ArchiveMember]:
    """Fail on missing sources or clashing names; return members sorted by arcname."""
    if not members:
        raise ArchiveError("Nothing to archive: no members given")

    missing = [str(m.source) for m in members if not m.source.is_file()]
    if missing:
        raise ArchiveError(
            "Expected build artifacts not found: " + ", ".join(sorted(missing))
        )

    seen: set[str] = set()
    for member in members:
        if member.arcname in seen:
            raise ArchiveError(f"Duplicate archive member name: {member.arcname}")
        seen.add(member.arcname)

    return sorted(members, key=lambda m: m.arcname)


def _write_zip(destination: Path, members: Sequence[ArchiveMember], epoch: int) -> None:
    date_time = _zip_date_time(epoch)
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for member in members:
            info = zipfile.ZipInfo(member.arcname, date_time=date_time)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.create_system = 3  # unix, so external_attr carries the mode
            info.external_attr = (stat.S_IFREG | member.mode) << 16
            with open(member.source, "rb") as src, archive.open(info, "w") as dst:
                while True:
                    chunk = src.read(_READ_CHUNK_SIZE)
                    if not chunk:
                        break
                    dst.write(chunk)


def _write_tar_xz(destination: Path, members: Sequence[ArchiveMember], epoch: int) -> None:
    with tarfile.open(destination, "w:xz", format=tarfile.PAX_FORMAT) as archive:
        for member in members:
            info = tarfile.TarInfo(member.arcname)
            info.size = member.source.stat().st_size
            info.mtime = epoch
            info.mode = member.mode
            info.type = tarfile.REGTYPE
            info.uid = info.gid = 0
            info.uname = info.gname = ""
            with open(member.source, "rb") as src:
                archive.addfile(info, src)


def create_archive(
    destination: Path,
    members: Sequence[ArchiveMember],
    archive_format: ArchiveFormat,
    source_date_epoch: int,
) -> Path:
    """
    Write members into a new archive at destination, replacing any old one.

    Args:
        destination: Absolute path of the archive to create.
        members: Files to include. Sources must exist.
        archive_format: ZIP or TAR_XZ.
        source_date_epoch: mtime for every member.

    Returns:
        destination, now holding the finished archive.

    Raises:
        ArchiveError: Missing or duplicate members, an epoch outside the
            range zip can store, or any I/O failure while writing.
    """
    _check_epoch(source_date_epoch, "source_date_epoch")
    ordered = _check_members(members)

    try:
        with staged_output(destination) as temp_path:
            match archive_format:
                case ArchiveFormat.ZIP:
                    _write_zip(temp_path, ordered, source_date_epoch)
                case ArchiveFormat.TAR_XZ:
                    _write_tar_xz(temp_path, ordered, source_date_epoch)
    except (OSError, tarfile.TarError, lzma.LZMAError) as err:
        raise ArchiveError(f"Failed to write archive {destination}: {err}") from err

    logger.info(
        "Archive written",
        extra={
            "archive": str(destination),
            "format": archive_format.value,
            "members": [m.arcname for m in ordered],
            "size_bytes": destination.stat().st_size,
        },
    )
    return destination
