# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release metadata: product name, version and target triple.

The raw readers are forgiving. read_manifest_version and query_host_triple
return an empty string when the manifest line or the toolchain output is
missing or garbled, and never raise for that. resolve_metadata is where
the values are checked: an empty product, version or triple stops the run
with MetadataError before anything is compiled or written.

Manifest parsing is line-based on purpose. The first line of the form

    version = "1.2.3"

wins, whichever table it sits in. In a normal Cargo.toml that is the
[package] version because [package] comes first.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from relpack.logging.logger import get_logger
from relpack.release.checksums.integrity import CHECKSUM_SUFFIX
from relpack.release.exceptions import MetadataError
from relpack.release.platform.targets import Target

_logger: logging.Logger = get_logger(__name__)

_VERSION_LINE = re.compile(r'^\s*version\s*=\s*"([^"]*)"')
_NAME_LINE = re.compile(r'^\s*name\s*=\s*"([^"]*)"')
_HOST_LINE_PREFIX = "host:"
_RUSTC_QUERY_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class ReleaseMetadata:
    """Everything that goes into the archive file name."""

    product: str
    version: str
    target: Target

    @property
    def archive_stem(self) -> str:
        return f"{self.product}-{self.version}.{self.target.triple}"

    @property
    def archive_name(self) -> str:
        return self.archive_stem + self.target.archive_format.extension

    @property
    def checksum_name(self) -> str:
        return self.archive_name + CHECKSUM_SUFFIX


def _first_match(manifest_path: Path, pattern: re.Pattern[str]) -> str:
    """Return the stripped capture of the first matching line, or "" if none."""
    text = manifest_path.read_text(encoding="utf-8")
    for line in text.splitlines():
        match = pattern.match(line)
        if match:
            return match.group(1).strip()
    return ""


def read_manifest_version(manifest_path: Path) -> str:
    """
    Extract the version string from a cargo manifest.

    Args:
        manifest_path: Path to Cargo.toml.

    Returns:
        The version with quotes and surrounding whitespace stripped, or ""
        if no `version = "..."` line exists.

    Raises:
        OSError: If the manifest can't be read.
    """
    return _first_match(manifest_path, _VERSION_LINE)


def read_manifest_name(manifest_path: Path) -> str:
    """Extract the first `name = "..."` value from a cargo manifest, or ""."""
    return _first_match(manifest_path, _NAME_LINE)


def parse_host_triple(rustc_verbose_version: str) -> str:
    """
    Pull the host triple out of `rustc -vV` output.

    The output looks like:

        rustc 1.79.0 (129f3b996 2024-06-10)
        binary: rustc
        host: x86_64-unknown-linux-gnu
        release: 1.79.0
    """
    for line in rustc_verbose_version.splitlines():
        stripped = line.strip()
        if stripped.startswith(_HOST_LINE_PREFIX):
            return stripped[len(_HOST_LINE_PREFIX):].strip()
    return ""


def query_host_triple(rustc_command: Sequence[str]) -> str:
    """
    Ask the toolchain for the host triple.

    Returns "" if rustc is missing, exits non-zero, hangs, or prints no
    host line. Never raises for those cases.
    """
    command = [*rustc_command, "-vV"]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=_RUSTC_QUERY_TIMEOUT_SECONDS,
            check=False,
        )
    except (FileNotFoundError, PermissionError, subprocess.TimeoutExpired) as err:
        _logger.warning(
            "Could not query host triple",
            extra={"command": command, "error": str(err)},
        )
        return ""

    if result.returncode != 0:
        _logger.warning(
            "Host triple query failed",
            extra={"command": command, "exit_code": result.returncode},
        )
        return ""

    return parse_host_triple(result.stdout)


def resolve_metadata(
    manifest_path: Path,
    rustc_command: Sequence[str],
    target_override: str | None = None,
    product_name: str | None = None,
) -> ReleaseMetadata:
    """
    Resolve and validate the product, version and target for a release.

    Args:
        manifest_path: Absolute path to Cargo.toml.
        rustc_command: Command used for `rustc -vV` when no override is given.
        target_override: Triple from --target, if any.
        product_name: Configured product name. Defaults to the manifest name.

    Returns:
        Validated ReleaseMetadata.

    Raises:
        MetadataError: Manifest unreadable, or product/version/triple empty.
    """
    if not manifest_path.is_file():
        raise MetadataError(f"Manifest not found: {manifest_path}")

    try:
        version = read_manifest_version(manifest_path)
        product = (product_name or "").strip() or read_manifest_name(manifest_path)
    except (OSError, UnicodeDecodeError) as err:
        raise MetadataError(f"Cannot read manifest {manifest_path}: {err}") from err

    if target_override is not None and target_override.strip():
        target = Target.from_triple(target_override.strip(), is_override=True)
    else:
        target = Target.from_triple(query_host_triple(rustc_command))

    problems: list[str] = []
    if not version:
        problems.append(f'no `version = "..."` line in {manifest_path}')
    if not product:
        problems.append(f'no product name configured and no `name = "..."` line in {manifest_path}')
    if not target.triple:
        problems.append("target triple is empty (pass --target or check `rustc -vV`)")
    if problems:
        raise MetadataError("Cannot resolve release metadata: " + "; ".join(problems))

    metadata = ReleaseMetadata(product=product, version=version, target=target)
    _logger.info(
        "Release metadata resolved",
        extra={
            "product": metadata.product,
            "version": metadata.version,
            "triple": target.triple,
            "platform": target.family.value,
            "archive_format": target.archive_format.value,
            "cross_compile": target.is_override,
        },
    )
    return metadata
