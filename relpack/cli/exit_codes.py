# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

A failed cargo build is the one exception: `relpack package` exits with
whatever status cargo returned, so scripts wrapping the packager see the
same code they would see from cargo itself.
"""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3
VALIDATION_ERROR: int = 4
METADATA_ERROR: int = 5
ARCHIVE_ERROR: int = 6
CHECKSUM_ERROR: int = 7
