# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Target triples, platform families and archive formats.

The triple is inspected exactly once, in PlatformFamily.from_triple.
Everything downstream (archive format, executable suffix) matches on the
enum instead of searching the string again.
"""

from dataclasses import dataclass
from enum import Enum


class PlatformFamily(Enum):
    """Operating-system family a target triple belongs to."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"

    @classmethod
    def from_triple(cls, triple: str) -> "PlatformFamily":
        """
        Classify a triple such as x86_64-pc-windows-msvc.

        Only the OS part matters. Windows wins over everything else because
        it decides both the archive format and the .exe suffix.
        """
        lowered = triple.lower()
        if "windows" in lowered:
            return cls.WINDOWS
        if "apple" in lowered or "darwin" in lowered:
            return cls.MACOS
        if "linux" in lowered:
            return cls.LINUX
        return cls.OTHER


class ArchiveFormat(Enum):
    """Container format for the release archive."""

    ZIP = "zip"
    TAR_XZ = "tar.xz"

    @property
    def extension(self) -> str:
        return "." + self.value

    @classmethod
    def for_family(cls, family: PlatformFamily) -> "ArchiveFormat":
        match family:
            case PlatformFamily.WINDOWS:
                return cls.ZIP
            case _:
                return cls.TAR_XZ


@dataclass(frozen=True)
class Target:
    """
    A resolved compilation target.

    is_override records whether the triple came from --target. Cargo puts
    the output of an explicit --target build under target/<triple>/release,
    and a host build under target/release, so the packager needs to know.
    """

    triple: str
    family: PlatformFamily
    is_override: bool = False

    @classmethod
    def from_triple(cls, triple: str, is_override: bool = False) -> "Target":
        return cls(
            triple=triple,
            family=PlatformFamily.from_triple(triple),
            is_override=is_override,
        )

    @property
    def archive_format(self) -> ArchiveFormat:
        return ArchiveFormat.for_family(self.family)

    @property
    def executable_suffix(self) -> str:
        match self.family:
            case PlatformFamily.WINDOWS:
                return ".exe"
            case _:
                return ""

    def executable_name(self, binary_name: str) -> str:
        """Platform file name of a cargo binary, e.g. "scan" -> "scan.exe" on Windows."""
        return binary_name + self.executable_suffix
