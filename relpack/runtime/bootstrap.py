# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for relpack.

One-time setup before any command does real work:
  1. Validate the interpreter version
  2. Configure the package logger (level and optional log file)
  3. Log a startup line with the environment

The log file path from config is anchored to the project directory, never
to whatever the process working directory happens to be.
"""

from pathlib import Path

from relpack.config.schema import GlobalConfig
from relpack.logging.logger import get_logger
from relpack.runtime.environment import check_minimum_python, get_system_info
from relpack.utils.paths import resolve_within


def bootstrap(config: GlobalConfig, project_dir: Path, log_level: str | None = None) -> None:
    """
    Run the bootstrap sequence.

    Args:
        config: The validated global configuration.
        project_dir: Absolute project directory, used to anchor log_file.
        log_level: Command-line override for config.log_level.
    """
    check_minimum_python()

    log_file = None
    if config.log_file is not None:
        log_file = resolve_within(project_dir, config.log_file)

    logger = get_logger(
        "relpack.runtime",
        log_level=log_level or config.log_level,
        log_file=log_file,
    )

    system_info = get_system_info()
    logger.debug(
        "relpack bootstrap complete",
        extra={
            "config_version": config.config_version,
            "project_dir": str(project_dir),
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )
