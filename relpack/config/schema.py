# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for relpack.

Each config section is a frozen pydantic model. Frozen means the config
can't be mutated once loaded; a packaging run sees exactly what the YAML
file said.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Every field has a default, so running without --config is the same as
loading an empty `global:` / `release:` file.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# 1980-01-01T00:00:00Z, the earliest timestamp a zip entry can hold.
DEFAULT_SOURCE_DATE_EPOCH = 315532800
# 2107-12-31T23:59:59Z, the latest one.
MAX_SOURCE_DATE_EPOCH = 4354819199


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to the project directory",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
        return upper


class ReleaseConfig(BaseModel):
    """
    Everything the release packager needs to know about the cargo project.

    Paths are relative to the project directory unless absolute. The
    commands are argument lists, not shell strings, so a wrapper such as
    `["cross"]` or `["python", "fake_cargo.py"]` works without quoting.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    manifest_path: str = Field(
        default="Cargo.toml",
        description="Manifest holding the `version = \"...\"` line",
    )
    product_name: Optional[str] = Field(
        default=None,
        description="Archive name prefix. Defaults to the manifest's `name = \"...\"`",
    )
    binary_names: list[str] = Field(
        default_factory=list,
        description="Executables to package, without platform suffix. Defaults to [product_name]",
    )
    extra_files: list[str] = Field(
        default_factory=list,
        description="Additional files (README, LICENSE) bundled at the archive root",
    )
    target_directory: str = Field(
        default="target",
        description="Cargo's output root",
    )
    release_directory: str = Field(
        default="release",
        description="Where archives and checksum files are written",
    )
    cargo_command: list[str] = Field(
        default_factory=lambda: ["cargo"],
        min_length=1,
        description="Command used to invoke cargo",
    )
    rustc_command: list[str] = Field(
        default_factory=lambda: ["rustc"],
        min_length=1,
        description="Command used to query the host triple (`rustc -vV`)",
    )
    cargo_args: list[str] = Field(
        default_factory=list,
        description="Extra arguments appended to `cargo build --release`",
    )
    compile_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Max seconds to wait for the build. None waits forever",
    )
    source_date_epoch: int = Field(
        default=DEFAULT_SOURCE_DATE_EPOCH,
        ge=DEFAULT_SOURCE_DATE_EPOCH,
        le=MAX_SOURCE_DATE_EPOCH,
        description="Timestamp stamped on every archive member. SOURCE_DATE_EPOCH env wins",
    )
    strict_arguments: bool = Field(
        default=False,
        description="Abort on unrecognised command-line arguments instead of warning",
    )

    @field_validator("binary_names", "extra_files")
    @classmethod
    def _no_blank_entries(cls, value: list[str]) -> list[str]:
        for entry in value:
            if not entry.strip():
                raise ValueError("entries must be non-empty strings")
        return value


class RelpackConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may contain either section or both. Missing sections fall
    back to their defaults.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, populate_by_name=True
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
