# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
relpack: release packager for cargo projects.

Builds a Rust binary in release mode, bundles it into a zip or tar.xz
archive named by version and target triple, and writes a SHA-256
checksum file next to it.
"""

__version__ = "0.1.0"
