# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the relpack CLI.

Each handler returns an exit code; main() passes it to sys.exit. Library
code raises, handlers catch and translate. Nothing below catches an
exception without logging it.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path

from relpack.cli.exit_codes import (
    ARCHIVE_ERROR,
    CHECKSUM_ERROR,
    CONFIG_ERROR,
    METADATA_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from relpack.config.exceptions import ConfigError
from relpack.config.loader import load_config
from relpack.config.schema import RelpackConfig
from relpack.logging.logger import get_logger
from relpack.runtime.bootstrap import bootstrap
from relpack.utils.paths import resolve_project_dir


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, RelpackConfig | None, Path | None, logging.Logger]:
    """
    The shared setup every command needs: project dir, config, bootstrap,
    and the unknown-argument policy.

    Returns (exit_code, config, project_dir, logger). On failure config and
    project_dir are None and the caller returns exit_code as-is.
    """
    logger = get_logger(f"relpack.cli.{command_name}", log_level=args.log_level or "INFO")

    try:
        project_dir = resolve_project_dir(args.project_dir)
    except NotADirectoryError as err:
        logger.error("Invalid project directory", extra={"error": str(err)})
        return USER_ERROR, None, None, logger

    config_path = None
    if args.config is not None:
        config_path = Path(args.config)
        if not config_path.is_absolute():
            config_path = Path.cwd() / config_path

    try:
        config = load_config(config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, None, logger

    bootstrap(config.global_config, project_dir, log_level=args.log_level)

    if args.unknown_args:
        strict = args.strict_args or config.release.strict_arguments
        if strict:
            logger.error(
                "Unrecognised arguments",
                extra={"command": command_name, "arguments": args.unknown_args},
            )
            return USER_ERROR, None, None, logger
        logger.warning(
            "Ignoring unrecognised arguments; see `relpack %s --help`",
            command_name,
            extra={"command": command_name, "arguments": args.unknown_args},
        )

    return SUCCESS, config, project_dir, logger


def handle_package(args: argparse.Namespace) -> int:
    """Build in release mode, archive the binaries, write the checksum."""
    exit_code, config, project_dir, logger = _load_and_bootstrap(args, "package")
    if config is None or project_dir is None:
        return exit_code

    from relpack.release.exceptions import (
        ArchiveError,
        ChecksumError,
        CompileError,
        MetadataError,
    )
    from relpack.release.packaging.packager import package_release, plan_release

    try:
        if args.dry_run:
            plan = plan_release(config.release, project_dir, args.target)
            logger.info(
                "Dry run, would package release",
                extra={
                    "archive": str(plan.archive_path),
                    "checksum_file": str(plan.checksum_path),
                    "build_dir": str(plan.build_dir),
                    "members": [m.arcname for m in plan.members],
                },
            )
            return SUCCESS

        result = package_release(config.release, project_dir, args.target)
        logger.info(
            "Release archive ready",
            extra={
                "archive": str(result.archive_path),
                "checksum_file": str(result.checksum_path),
                "sha256": result.sha256,
            },
        )
        return SUCCESS

    except MetadataError as err:
        logger.error("Metadata resolution failed", extra={"error": str(err)})
        return METADATA_ERROR
    except CompileError as err:
        logger.error(
            "Compilation failed",
            extra={"error": str(err), "exit_code": err.exit_code},
        )
        return err.exit_code
    except ArchiveError as err:
        logger.error("Archive creation failed", extra={"error": str(err)})
        return ARCHIVE_ERROR
    except ChecksumError as err:
        logger.error("Checksum generation failed", extra={"error": str(err)})
        return CHECKSUM_ERROR
    except Exception as err:
        logger.error("Packaging failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_verify(args: argparse.Namespace) -> int:
    """Check an archive against its sibling .sha256 file."""
    exit_code, config, _project_dir, logger = _load_and_bootstrap(args, "verify")
    if config is None:
        return exit_code

    from relpack.release.checksums.integrity import verify_archive

    try:
        archive_path = Path(args.archive).resolve()
        result = verify_archive(archive_path)
        if not result.is_valid:
            logger.error(
                "Verification failed",
                extra={"archive": result.archive, "errors": result.errors},
            )
            return VALIDATION_ERROR

        logger.info("Verification passed", extra={"archive": result.archive})
        return SUCCESS

    except Exception as err:
        logger.error("Verification failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Display environment and toolchain information."""
    exit_code, config, _project_dir, logger = _load_and_bootstrap(args, "info")
    if config is None:
        return exit_code

    from relpack import __version__
    from relpack.release.metadata.resolver import query_host_triple
    from relpack.runtime.environment import get_system_info, locate_tool

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "relpack_version": __version__,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
            "cargo": locate_tool(config.release.cargo_command),
            "rustc": locate_tool(config.release.rustc_command),
            "host_triple": query_host_triple(config.release.rustc_command),
            "config": args.config,
        },
    )
    return SUCCESS
