# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Interpreter and toolchain checks.

`relpack info` reports where cargo and rustc resolve to, so a CI log shows
which toolchain a release was built with before any build starts.
"""

import platform
import shutil
import sys
from typing import NamedTuple, Sequence

REQUIRED_PYTHON = (3, 11)


class SystemInfo(NamedTuple):
    python_version: str
    platform: str
    architecture: str
    hostname: str


def get_python_version() -> tuple[int, int, int]:
    major, minor, micro = sys.version_info[:3]
    return major, minor, micro


def check_minimum_python() -> None:
    """
    Refuse to run on an interpreter older than REQUIRED_PYTHON.

    Raises:
        RuntimeError: Interpreter too old.
    """
    current = get_python_version()[:2]
    if current < REQUIRED_PYTHON:
        required = ".".join(str(part) for part in REQUIRED_PYTHON)
        found = ".".join(str(part) for part in current)
        raise RuntimeError(f"relpack needs Python {required} or newer, found {found}")


def get_system_info() -> SystemInfo:
    """Describe the machine the packager is running on."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )


def locate_tool(command: Sequence[str]) -> str | None:
    """
    Absolute path of the executable a configured command starts with.

    Returns None when it isn't on PATH. Commands given as an explicit path
    are returned as-is if the file exists and is executable.
    """
    if not command:
        return None
    return shutil.which(command[0])
