# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the cargo release-build harness.
"""

from pathlib import Path

import pytest

from relpack.release.compiler.harness import (
    EXIT_COMMAND_NOT_FOUND,
    build_command,
    compile_release,
    output_directory,
    shell_exit_status,
)
from relpack.release.exceptions import CompileError
from relpack.release.platform.targets import Target

HOST = Target.from_triple("x86_64-unknown-linux-gnu")
CROSS = Target.from_triple("x86_64-pc-windows-gnu", is_override=True)


class TestCommand:
    def test_host_build_has_no_target_flag(self, tmp_path: Path) -> None:
        command = build_command(["cargo"], tmp_path / "Cargo.toml", HOST)
        assert command == [
            "cargo", "build", "--release", "--manifest-path", str(tmp_path / "Cargo.toml"),
        ]

    def test_cross_build_passes_target(self, tmp_path: Path) -> None:
        command = build_command(["cargo"], tmp_path / "Cargo.toml", CROSS, ["--locked"])
        assert command[-3:] == ["--target", "x86_64-pc-windows-gnu", "--locked"]

    def test_output_directory(self, tmp_path: Path) -> None:
        assert output_directory(tmp_path, HOST) == tmp_path / "release"
        assert output_directory(tmp_path, CROSS) == tmp_path / "x86_64-pc-windows-gnu" / "release"


class TestCompile:
    def test_success(self, cargo_project: Path, cargo_command: list[str]) -> None:
        result = compile_release(
            cargo_project, cargo_project / "Cargo.toml", HOST, cargo_command=cargo_command
        )
        assert result.success
        assert result.exit_code == 0
        assert (cargo_project / "target" / "release" / "scan").is_file()

    def test_cross_compile_output_location(
        self, cargo_project: Path, cargo_command: list[str]
    ) -> None:
        compile_release(
            cargo_project, cargo_project / "Cargo.toml", CROSS, cargo_command=cargo_command
        )
        built = cargo_project / "target" / "x86_64-pc-windows-gnu" / "release" / "scan.exe"
        assert built.is_file()

    def test_failure_carries_exit_code(
        self, cargo_project: Path, cargo_command: list[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_CARGO_EXIT", "2")
        with pytest.raises(CompileError) as excinfo:
            compile_release(
                cargo_project, cargo_project / "Cargo.toml", HOST, cargo_command=cargo_command
            )
        assert excinfo.value.exit_code == 2

    def test_missing_compiler(self, cargo_project: Path, tmp_path: Path) -> None:
        with pytest.raises(CompileError) as excinfo:
            compile_release(
                cargo_project,
                cargo_project / "Cargo.toml",
                HOST,
                cargo_command=[str(tmp_path / "no-such-cargo")],
            )
        assert excinfo.value.exit_code == EXIT_COMMAND_NOT_FOUND


def test_signal_exit_status_matches_shell() -> None:
    assert shell_exit_status(-9) == 137
    assert shell_exit_status(101) == 101
