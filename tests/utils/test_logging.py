# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON with the mandatory fields
  - extra context fields get merged into the JSON
  - the level set through get_logger applies to every relpack module
"""

import json
import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

from relpack.logging.logger import ROOT_LOGGER_NAME, JsonFormatter, get_logger


@pytest.fixture(autouse=True)
def _restore_level() -> Iterator[None]:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def _last_json_line(out: str) -> dict[str, object]:
    return json.loads(out.strip().splitlines()[-1])


def test_mandatory_fields(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("relpack.test.fields", log_level="INFO")
    logger.info("test message")
    parsed = _last_json_line(capsys.readouterr().out)
    assert parsed["level"] == "INFO"
    assert parsed["module"] == "relpack.test.fields"
    assert parsed["msg"] == "test message"
    assert "ts" in parsed


def test_extra_fields_are_included(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("relpack.test.extra", log_level="INFO")
    logger.info("archived", extra={"archive": "/tmp/x.zip", "exit_code": 0})
    parsed = _last_json_line(capsys.readouterr().out)
    assert parsed["archive"] == "/tmp/x.zip"
    assert parsed["exit_code"] == 0


def test_level_applies_to_all_modules(capsys: pytest.CaptureFixture[str]) -> None:
    module_logger = get_logger("relpack.test.module")
    get_logger("relpack.test.cli", log_level="WARNING")
    module_logger.info("hidden")
    module_logger.warning("shown")
    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line)["msg"] for line in lines] == ["shown"]


def test_invalid_level_rejected() -> None:
    with pytest.raises(ValueError):
        get_logger("relpack.test.bad", log_level="LOUD")


def test_log_file_receives_entries(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "relpack.log"
    logger = get_logger("relpack.test.file", log_level="INFO", log_file=log_file)
    logger.info("to file")
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()
    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert entries[-1]["msg"] == "to file"


def test_formatter_includes_traceback() -> None:
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.getLogger("relpack.test.exc").makeRecord(
            "relpack.test.exc", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )
    parsed = json.loads(JsonFormatter().format(record))
    assert "ValueError: bad" in parsed["exc"]
