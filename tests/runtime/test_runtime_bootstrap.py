# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for environment validation and the bootstrap sequence.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

from relpack.config.schema import GlobalConfig
from relpack.logging.logger import ROOT_LOGGER_NAME
from relpack.runtime.bootstrap import bootstrap
from relpack.runtime.environment import (
    check_minimum_python,
    get_python_version,
    get_system_info,
    locate_tool,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


class TestEnvironment:
    def test_python_version_returns_tuple(self) -> None:
        version = get_python_version()
        assert len(version) == 3
        assert all(isinstance(v, int) for v in version)

    def test_current_interpreter_passes(self) -> None:
        check_minimum_python()

    def test_system_info_fields(self) -> None:
        info = get_system_info()
        assert info.python_version
        assert info.platform

    def test_locate_tool_finds_interpreter(self) -> None:
        assert locate_tool([sys.executable, "script.py"]) is not None

    def test_locate_tool_missing(self, tmp_path: Path) -> None:
        assert locate_tool([str(tmp_path / "no-such-cargo")]) is None
        assert locate_tool([]) is None


class TestBootstrap:
    def test_config_level_applies(self, tmp_path: Path) -> None:
        bootstrap(GlobalConfig(log_level="ERROR"), tmp_path)
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.ERROR

    def test_cli_level_overrides_config(self, tmp_path: Path) -> None:
        bootstrap(GlobalConfig(log_level="ERROR"), tmp_path, log_level="DEBUG")
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG

    def test_log_file_is_anchored_to_project_dir(self, tmp_path: Path) -> None:
        bootstrap(GlobalConfig(log_level="DEBUG", log_file="logs/relpack.log"), tmp_path)
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "relpack.log"
        entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert any(e["msg"] == "relpack bootstrap complete" for e in entries)
