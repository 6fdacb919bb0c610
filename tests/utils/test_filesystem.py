# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for atomic writes and staged outputs.
"""

import stat
from pathlib import Path

import pytest

from relpack.utils.filesystem import atomic_write, safe_delete, staged_output
from relpack.utils.paths import resolve_project_dir, resolve_within


class TestStagedOutput:
    def test_replaces_target_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "out" / "file.bin"
        with staged_output(target) as temp:
            temp.write_bytes(b"new")
        assert target.read_bytes() == b"new"
        assert stat.S_IMODE(target.stat().st_mode) == 0o644
        assert [p.name for p in target.parent.iterdir()] == ["file.bin"]

    def test_leaves_target_untouched_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "file.bin"
        target.write_bytes(b"old")
        with pytest.raises(RuntimeError):
            with staged_output(target) as temp:
                temp.write_bytes(b"half")
                raise RuntimeError("boom")
        assert target.read_bytes() == b"old"
        assert [p.name for p in tmp_path.iterdir()] == ["file.bin"]


def test_atomic_write_keeps_unix_newlines(tmp_path: Path) -> None:
    target = tmp_path / "sum.sha256"
    atomic_write(target, "abc  file\n")
    assert target.read_bytes() == b"abc  file\n"


def test_safe_delete(tmp_path: Path) -> None:
    path = tmp_path / "x"
    path.write_text("x", encoding="utf-8")
    assert safe_delete(path) is True
    assert safe_delete(path) is False


class TestPaths:
    def test_resolve_within_anchors_relative_paths(self, tmp_path: Path) -> None:
        assert resolve_within(tmp_path, "release") == (tmp_path / "release").resolve()

    def test_resolve_within_keeps_absolute_paths(self, tmp_path: Path) -> None:
        other = tmp_path / "elsewhere"
        assert resolve_within(tmp_path / "project", other) == other.resolve()

    def test_resolve_project_dir_rejects_missing(self, tmp_path: Path) -> None:
        with pytest.raises(NotADirectoryError):
            resolve_project_dir(tmp_path / "missing")

    def test_resolve_project_dir_defaults_to_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert resolve_project_dir(None) == tmp_path.resolve()
