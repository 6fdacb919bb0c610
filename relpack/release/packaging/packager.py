# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packager: build, archive, checksum.

One call to package_release runs the whole pipeline for one target:

    resolve metadata -> cargo build --release -> archive -> .sha256

Output layout:

    <release-dir>/
    ├─ <product>-<version>.<triple>.tar.xz     (zip for Windows triples)
    └─ <product>-<version>.<triple>.tar.xz.sha256

Each step raises its own exception class and stops the pipeline. A failed
build leaves the release directory untouched. If the checksum can't be
written, the archive written moments earlier is removed again so an
archive never ships without its checksum.

No step changes the process working directory; every path is absolute.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from relpack.config.schema import ReleaseConfig
from relpack.logging.logger import get_logger
from relpack.release.checksums.integrity import write_checksum_file
from relpack.release.compiler.harness import compile_release, output_directory
from relpack.release.exceptions import ArchiveError, ChecksumError
from relpack.release.metadata.resolver import ReleaseMetadata, resolve_metadata
from relpack.release.packaging.archiver import (
    ArchiveMember,
    create_archive,
    resolve_source_date_epoch,
)
from relpack.utils.filesystem import safe_delete
from relpack.utils.paths import ensure_directory, resolve_within

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleasePlan:
    """Resolved paths and names for one packaging run, before anything is built."""

    metadata: ReleaseMetadata
    project_dir: Path
    manifest_path: Path
    build_dir: Path
    release_dir: Path
    members: tuple[ArchiveMember, ...]

    @property
    def archive_path(self) -> Path:
        return self.release_dir / self.metadata.archive_name

    @property
    def checksum_path(self) -> Path:
        return self.release_dir / self.metadata.checksum_name


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a successful packaging run."""

    metadata: ReleaseMetadata
    archive_path: Path
    checksum_path: Path
    sha256: str
    member_names: tuple[str, ...]


def plan_release(
    config: ReleaseConfig,
    project_dir: Path,
    target_override: str | None = None,
) -> ReleasePlan:
    """
    Resolve metadata and every path the run will touch. Writes nothing.

    Raises:
        MetadataError: Version, product or triple can't be resolved.
    """
    manifest_path = resolve_within(project_dir, config.manifest_path)
    metadata = resolve_metadata(
        manifest_path=manifest_path,
        rustc_command=config.rustc_command,
        target_override=target_override,
        product_name=config.product_name,
    )

    target_dir = resolve_within(project_dir, config.target_directory)
    build_dir = output_directory(target_dir, metadata.target)
    release_dir = resolve_within(project_dir, config.release_directory)

    binary_names = config.binary_names or [metadata.product]
    members = [
        ArchiveMember(
            source=build_dir / metadata.target.executable_name(name),
            arcname=metadata.target.executable_name(name),
            executable=True,
        )
        for name in binary_names
    ]
    for extra in config.extra_files:
        source = resolve_within(project_dir, extra)
        members.append(ArchiveMember(source=source, arcname=source.name))

    return ReleasePlan(
        metadata=metadata,
        project_dir=project_dir,
        manifest_path=manifest_path,
        build_dir=build_dir,
        release_dir=release_dir,
        members=tuple(members),
    )


def package_release(
    config: ReleaseConfig,
    project_dir: Path,
    target_override: str | None = None,
) -> ReleaseResult:
    """
    Build the project in release mode and package it with a checksum.

    Args:
        config: Release section of the validated config.
        project_dir: Absolute directory holding the cargo project.
        target_override: Cross-compilation triple, or None for the host.

    Returns:
        ReleaseResult with the absolute archive and checksum paths.

    Raises:
        MetadataError: Before anything is built.
        CompileError: Build failed; exit_code is cargo's.
        ArchiveError: An expected binary or extra file is missing, the
            release directory can't be created, or the archive couldn't
            be written.
        ChecksumError: The checksum file couldn't be written.
    """
    plan = plan_release(config, project_dir, target_override)
    metadata = plan.metadata

    compile_release(
        project_dir=plan.project_dir,
        manifest_path=plan.manifest_path,
        target=metadata.target,
        cargo_command=config.cargo_command,
        extra_args=config.cargo_args,
        timeout_seconds=config.compile_timeout_seconds,
    )

    epoch = resolve_source_date_epoch(config.source_date_epoch)
    try:
        ensure_directory(plan.release_dir)
    except OSError as err:
        raise ArchiveError(
            f"Cannot create release directory {plan.release_dir}: {err}"
        ) from err
    archive_path = create_archive(
        destination=plan.archive_path,
        members=plan.members,
        archive_format=metadata.target.archive_format,
        source_date_epoch=epoch,
    )

    try:
        checksum_path, digest = write_checksum_file(archive_path)
    except OSError as err:
        safe_delete(archive_path)
        _logger.warning(
            "Removed archive after checksum failure",
            extra={"archive": str(archive_path)},
        )
        raise ChecksumError(f"Failed to write checksum for {archive_path}: {err}") from err

    result = ReleaseResult(
        metadata=metadata,
        archive_path=archive_path,
        checksum_path=checksum_path,
        sha256=digest,
        member_names=tuple(sorted(m.arcname for m in plan.members)),
    )
    _logger.info(
        "Release packaged",
        extra={
            "archive": str(result.archive_path),
            "checksum_file": str(result.checksum_path),
            "sha256": digest,
        },
    )
    return result
