# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packaging subsystem for relpack.

Resolves release metadata, drives the cargo release build, assembles a
deterministic archive for the target platform, and writes the matching
SHA-256 checksum file. Verification of a previously packaged archive
lives here too.
"""
