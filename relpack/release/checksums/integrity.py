# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release checksum files.

Every archive gets a sibling file named `<archive-filename>.sha256` holding
a single line in GNU coreutils format:

    <sha256hex>  <archive-filename>

Two spaces, bare file name, trailing newline. `sha256sum -c` run from the
release directory accepts it as-is.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.utils.filesystem import atomic_write
from relpack.utils.hashing import compute_sha256, is_sha256_hex

_logger: logging.Logger = get_logger(__name__)

CHECKSUM_SUFFIX = ".sha256"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking an archive against its checksum file."""

    is_valid: bool
    archive: str
    expected: str | None = None
    actual: str | None = None
    errors: list[str] = field(default_factory=list)


def checksum_path_for(archive_path: Path) -> Path:
    """`release/foo.tar.xz` -> `release/foo.tar.xz.sha256`."""
    return archive_path.with_name(archive_path.name + CHECKSUM_SUFFIX)


def format_checksum_line(digest: str, filename: str) -> str:
    return f"{digest}  {filename}\n"


def write_checksum_file(archive_path: Path) -> tuple[Path, str]:
    """
    Hash an archive and write its checksum file next to it.

    The file is replaced atomically, so a rerun overwrites rather than
    appends.

    Args:
        archive_path: Absolute path to the archive.

    Returns:
        (checksum file path, hex digest).

    Raises:
        OSError: If the archive can't be read or the file can't be written.
    """
    digest = compute_sha256(archive_path)
    checksum_path = checksum_path_for(archive_path)
    atomic_write(checksum_path, format_checksum_line(digest, archive_path.name))

    _logger.info(
        "Checksum file written",
        extra={"path": str(checksum_path), "sha256": digest},
    )
    return checksum_path, digest


def parse_checksum_file(checksum_path: Path) -> tuple[str, str]:
    """
    Parse a single-entry checksum file.

    Accepts the binary-mode marker `*` sha256sum writes with -b.

    Returns:
        (lowercase hex digest, file name).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the content isn't exactly one well-formed entry.
    """
    if not checksum_path.is_file():
        raise FileNotFoundError(f"Checksum file not found: {checksum_path}")

    lines = [
        line.strip()
        for line in checksum_path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    if len(lines) != 1:
        raise ValueError(
            f"Expected exactly one checksum entry in {checksum_path.name}, found {len(lines)}"
        )

    line = lines[0]
    parts = line.split(maxsplit=1)
    if len(parts) != 2:
        raise ValueError(f"Invalid checksum format: expected '<sha256>  <filename>', got: {line!r}")

    digest, filename = parts
    filename = filename.removeprefix("*")
    if not is_sha256_hex(digest):
        raise ValueError(f"Invalid SHA256 digest: {digest!r}")
    if not filename:
        raise ValueError(f"Missing filename in checksum entry: {line!r}")

    return digest.lower(), filename


def verify_archive(archive_path: Path) -> VerificationResult:
    """
    Recompute an archive's SHA256 and compare it with its checksum file.

    Every problem is reported in the result; nothing raises for a bad
    archive or a bad checksum file.
    """
    archive = str(archive_path)
    if not archive_path.is_file():
        return VerificationResult(
            is_valid=False, archive=archive, errors=[f"Archive not found: {archive_path}"]
        )

    checksum_path = checksum_path_for(archive_path)
    try:
        expected, filename = parse_checksum_file(checksum_path)
    except (FileNotFoundError, ValueError) as err:
        return VerificationResult(is_valid=False, archive=archive, errors=[str(err)])

    errors: list[str] = []
    if filename != archive_path.name:
        errors.append(
            f"Checksum file names {filename!r}, expected {archive_path.name!r}"
        )

    actual = compute_sha256(archive_path)
    if actual != expected:
        errors.append("SHA256 mismatch")
        _logger.error(
            "Checksum mismatch",
            extra={"archive": archive, "expected": expected, "actual": actual},
        )

    is_valid = not errors
    if is_valid:
        _logger.info("Checksum verified", extra={"archive": archive, "sha256": actual})

    return VerificationResult(
        is_valid=is_valid,
        archive=archive,
        expected=expected,
        actual=actual,
        errors=errors,
    )
