# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for relpack.

Every operation is a subcommand of `relpack`. The global options
(--config, --log-level, --dry-run, --project-dir, --strict-args) are
inherited by every subcommand through argparse's parent parser mechanism.

Unrecognised arguments don't stop argparse here: they are collected with
parse_known_args and handed to the command, which either warns and carries
on (default) or aborts with USER_ERROR when strict argument handling is on.

Usage:
    relpack package
    relpack package --target x86_64-pc-windows-gnu
    relpack --config relpack.yaml --strict-args package
    relpack verify release/scan-0.3.1.x86_64-unknown-linux-gnu.tar.xz
    relpack info
"""

import argparse
import sys

from relpack.cli.commands import handle_info, handle_package, handle_verify
from relpack.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so the parent's -h doesn't collide with the subcommand's.
    Defaults are SUPPRESS so a global option given before the subcommand
    isn't clobbered by the subparser's own default for it.
    """
    parent = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    parent.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config file).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Resolve and report what would be built without building anything.",
    )
    parent.add_argument(
        "--project-dir",
        type=str,
        dest="project_dir",
        help="Directory containing Cargo.toml (default: current directory).",
    )
    parent.add_argument(
        "--strict-args",
        action="store_true",
        dest="strict_args",
        help="Treat unrecognised arguments as a usage error instead of a warning.",
    )
    return parent


_GLOBAL_DEFAULTS: dict[str, object] = {
    "config": None,
    "log_level": None,
    "dry_run": False,
    "project_dir": None,
    "strict_args": False,
}


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register every subcommand and its handler via set_defaults(func=...)."""
    package_parser = subparsers.add_parser(
        "package",
        parents=[parent],
        help="Build in release mode and create the archive plus checksum.",
    )
    package_parser.add_argument(
        "--target",
        type=str,
        default=None,
        help="Cross-compilation target triple (default: host triple from rustc).",
    )
    package_parser.set_defaults(func=handle_package)

    verify_parser = subparsers.add_parser(
        "verify",
        parents=[parent],
        help="Check an archive against its .sha256 file.",
    )
    verify_parser.add_argument("archive", type=str, help="Path to the release archive.")
    verify_parser.set_defaults(func=handle_verify)

    info_parser = subparsers.add_parser(
        "info",
        parents=[parent],
        help="Display environment and toolchain info.",
    )
    info_parser.set_defaults(func=handle_info)


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="relpack",
        description="relpack: build, archive and checksum cargo releases.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse the command line, keeping unrecognised arguments in args.unknown_args.
    """
    root_parser = build_parser()
    args, unknown = root_parser.parse_known_args(argv)
    for key, value in _GLOBAL_DEFAULTS.items():
        if not hasattr(args, key):
            setattr(args, key, value)
    args.unknown_args = unknown
    return args


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    args = parse_arguments(argv)

    if getattr(args, "func", None) is None:
        build_parser().print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
