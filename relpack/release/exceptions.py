# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the release packager, one per pipeline step.

The CLI maps each class to its own exit code, except CompileError which
carries the compiler's exit status and hands it back unchanged.
"""


class ReleaseError(Exception):
    """Base for all release packaging errors."""


class MetadataError(ReleaseError):
    """Version, product name or target triple could not be resolved."""


class CompileError(ReleaseError):
    """The release build exited non-zero, timed out, or couldn't be started."""

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ArchiveError(ReleaseError):
    """An expected artifact was missing or the archive couldn't be written."""


class ChecksumError(ReleaseError):
    """The archive couldn't be hashed or the checksum file couldn't be written."""
