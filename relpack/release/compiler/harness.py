# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release-mode cargo build.

Runs `cargo build --release` once, blocking, with cargo's own output going
straight to the terminal. There is no retry and, unless configured, no
timeout. The only thing the packager looks at is the exit status: zero
means the binary is in the output directory, anything else stops the run
and is handed back to the caller unchanged.

--target is only passed for an explicit cross-compilation target. A host
build writes to target/release, an explicit --target build to
target/<triple>/release, and output_directory mirrors that.
"""

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from relpack.logging.logger import get_logger
from relpack.release.exceptions import CompileError
from relpack.release.platform.targets import Target

logger = get_logger(__name__)

# Conventional shell statuses for "command not found" and "timed out".
EXIT_COMMAND_NOT_FOUND = 127
EXIT_TIMEOUT = 124

RELEASE_PROFILE_DIR = "release"


def shell_exit_status(returncode: int) -> int:
    """Map subprocess returncodes to what a shell would report (-9 becomes 137)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


@dataclass(frozen=True)
class CompileResult:
    """Outcome of one cargo invocation."""

    exit_code: int
    command: tuple[str, ...]
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def build_command(
    cargo_command: Sequence[str],
    manifest_path: Path,
    target: Target,
    extra_args: Sequence[str] = (),
) -> list[str]:
    """Assemble the argv for a release build."""
    command = [
        *cargo_command,
        "build",
        "--release",
        "--manifest-path",
        str(manifest_path),
    ]
    if target.is_override:
        command.extend(["--target", target.triple])
    command.extend(extra_args)
    return command


def output_directory(target_dir: Path, target: Target) -> Path:
    """Directory cargo leaves the release binaries in for this target."""
    if target.is_override:
        return target_dir / target.triple / RELEASE_PROFILE_DIR
    return target_dir / RELEASE_PROFILE_DIR


def compile_release(
    project_dir: Path,
    manifest_path: Path,
    target: Target,
    cargo_command: Sequence[str] = ("cargo",),
    extra_args: Sequence[str] = (),
    timeout_seconds: int | None = None,
) -> CompileResult:
    """
    Build the project in release mode for target.

    Args:
        project_dir: Absolute project directory, used as cargo's cwd.
        manifest_path: Absolute path to Cargo.toml.
        target: Resolved target. --target is passed only for overrides.
        cargo_command: argv prefix for cargo.
        extra_args: Appended to the build command verbatim.
        timeout_seconds: Hard limit on the build, or None for no limit.

    Returns:
        CompileResult of a successful build.

    Raises:
        CompileError: Non-zero exit (exit_code is cargo's), missing cargo
            (127) or timeout (124).
    """
    command = build_command(cargo_command, manifest_path, target, extra_args)
    logger.info(
        "Starting release build",
        extra={"command": command, "triple": target.triple},
    )
    start = time.monotonic()

    try:
        completed = subprocess.run(
            command,
            cwd=str(project_dir),
            timeout=timeout_seconds,
            check=False,
        )
    except FileNotFoundError as err:
        logger.error(
            "Compiler not found. Is Rust installed?",
            extra={"command": command},
        )
        raise CompileError(
            f"Compiler executable not found: {command[0]}",
            exit_code=EXIT_COMMAND_NOT_FOUND,
        ) from err
    except subprocess.TimeoutExpired as err:
        logger.error(
            "Release build timed out",
            extra={"timeout_seconds": timeout_seconds, "command": command},
        )
        raise CompileError(
            f"Release build timed out after {timeout_seconds}s",
            exit_code=EXIT_TIMEOUT,
        ) from err

    result = CompileResult(
        exit_code=completed.returncode,
        command=tuple(command),
        elapsed_seconds=time.monotonic() - start,
    )

    if not result.success:
        logger.error(
            "Release build failed",
            extra={
                "exit_code": result.exit_code,
                "elapsed_seconds": round(result.elapsed_seconds, 3),
            },
        )
        raise CompileError(
            f"Release build exited with status {result.exit_code}",
            exit_code=shell_exit_status(result.exit_code),
        )

    logger.info(
        "Release build finished",
        extra={"elapsed_seconds": round(result.elapsed_seconds, 3)},
    )
    return result
