# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for relpack tests.

No test needs a Rust toolchain. `cargo` and `rustc` are replaced by tiny
Python scripts invoked as [sys.executable, script], which is exactly how
a user would point relpack at a wrapper through cargo_command/rustc_command.

The fake cargo honours a few environment variables:
  FAKE_CARGO_EXIT          exit with this status without building
  FAKE_CARGO_SKIP_BINARY   succeed but don't write the binary
  FAKE_CARGO_BINARY        binary name to write (default "scan")
  FAKE_CARGO_PAYLOAD       bytes written into the binary

The fake rustc prints `rustc -vV` output whose host line is taken from
FAKE_RUSTC_HOST, or exits with FAKE_RUSTC_EXIT.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest
import yaml

from relpack.config.schema import ReleaseConfig

_FAKE_CARGO = textwrap.dedent("""\
    import os
    import sys
    from pathlib import Path

    args = sys.argv[1:]
    if os.environ.get("FAKE_CARGO_EXIT"):
        sys.exit(int(os.environ["FAKE_CARGO_EXIT"]))

    assert args[:2] == ["build", "--release"], args
    manifest = Path(args[args.index("--manifest-path") + 1])
    triple = args[args.index("--target") + 1] if "--target" in args else None

    out_dir = manifest.parent / "target"
    if triple is not None:
        out_dir = out_dir / triple
    out_dir = out_dir / "release"
    out_dir.mkdir(parents=True, exist_ok=True)

    if not os.environ.get("FAKE_CARGO_SKIP_BINARY"):
        name = os.environ.get("FAKE_CARGO_BINARY", "scan")
        if triple is not None and "windows" in triple:
            name += ".exe"
        payload = os.environ.get("FAKE_CARGO_PAYLOAD", "binary for " + str(triple))
        (out_dir / name).write_bytes(payload.encode())
""")

_FAKE_RUSTC = textwrap.dedent("""\
    import os
    import sys

    if os.environ.get("FAKE_RUSTC_EXIT"):
        sys.exit(int(os.environ["FAKE_RUSTC_EXIT"]))

    host = os.environ.get("FAKE_RUSTC_HOST", "x86_64-unknown-linux-gnu")
    print("rustc 1.79.0 (129f3b996 2024-06-10)")
    print("binary: rustc")
    print("commit-hash: 129f3b9964af4d4a709d1383930ade12dfe7c081")
    if host:
        print("host: " + host)
    print("release: 1.79.0")
    print("LLVM version: 18.1.7")
""")


@pytest.fixture(autouse=True)
def _clean_fake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure nothing leaks in from the developer's shell."""
    for name in (
        "FAKE_CARGO_EXIT",
        "FAKE_CARGO_SKIP_BINARY",
        "FAKE_CARGO_BINARY",
        "FAKE_CARGO_PAYLOAD",
        "FAKE_RUSTC_HOST",
        "FAKE_RUSTC_EXIT",
        "SOURCE_DATE_EPOCH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def toolchain_dir(tmp_path: Path) -> Path:
    """Directory holding fake_cargo.py and fake_rustc.py."""
    directory = tmp_path / "toolchain"
    directory.mkdir()
    (directory / "fake_cargo.py").write_text(_FAKE_CARGO, encoding="utf-8")
    (directory / "fake_rustc.py").write_text(_FAKE_RUSTC, encoding="utf-8")
    return directory


@pytest.fixture()
def cargo_command(toolchain_dir: Path) -> list[str]:
    return [sys.executable, str(toolchain_dir / "fake_cargo.py")]


@pytest.fixture()
def rustc_command(toolchain_dir: Path) -> list[str]:
    return [sys.executable, str(toolchain_dir / "fake_rustc.py")]


@pytest.fixture()
def cargo_project(tmp_path: Path) -> Path:
    """A minimal cargo project directory named `scan`, version 1.2.3."""
    project = tmp_path / "scan"
    project.mkdir()
    (project / "Cargo.toml").write_text(
        textwrap.dedent("""\
            [package]
            name = "scan"
            version = "1.2.3"
            edition = "2021"

            [dependencies]
            clap = { version = "4.5", features = ["derive"] }
            ssh2 = "0.9"
        """),
        encoding="utf-8",
    )
    (project / "README.md").write_text("# scan\n", encoding="utf-8")
    (project / "LICENSE").write_text("MIT\n", encoding="utf-8")
    return project


@pytest.fixture()
def make_release_config(
    cargo_command: list[str], rustc_command: list[str]
) -> Callable[..., ReleaseConfig]:
    """Factory for a ReleaseConfig wired to the fake toolchain."""

    def _make(**overrides: object) -> ReleaseConfig:
        values: dict[str, object] = {
            "cargo_command": cargo_command,
            "rustc_command": rustc_command,
        }
        values.update(overrides)
        return ReleaseConfig.model_validate(values)

    return _make


@pytest.fixture()
def config_file(tmp_path: Path, cargo_command: list[str], rustc_command: list[str]) -> Path:
    """A YAML config file pointing relpack at the fake toolchain."""
    content = {
        "global": {"config_version": "1.0.0", "log_level": "DEBUG"},
        "release": {
            "cargo_command": cargo_command,
            "rustc_command": rustc_command,
        },
    }
    path = tmp_path / "relpack.yaml"
    path.write_text(yaml.safe_dump(content), encoding="utf-8")
    return path


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    path = tmp_path / "broken.yaml"
    path.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return path
