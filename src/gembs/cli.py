"""
Command-line interface for gembs.

This module provides the `gembs` CLI tool:

    gembs build                    # Build the project in the current directory
    gembs build path/to/project    # Build a specific project
    gembs build -t clang           # Override the toolchain target
    gembs resolve                  # Print the resolved build description
    gembs plugins                  # List discovered plugins
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from gembs import __version__
from gembs.build import BuildOrchestrator
from gembs.config import BuildDescription, EngineOptions, StepCompletionPolicy, UnknownMnemonicPolicy
from gembs.errors import GembsError
from gembs.output import configure_logging, log, log_build_complete, log_detail, log_error, log_header, log_success
from gembs.plugins.registry import PluginRegistry


@dataclass
class BuildArgs:
    """Arguments shared by the build and resolve commands."""

    project_dir: Path
    target: Optional[str] = None
    strict_mnemonics: bool = False
    detach_steps: bool = False
    plugin_dirs: List[Path] = field(default_factory=list)
    verbose: bool = False


@dataclass
class PluginsArgs:
    """Arguments for the plugins command."""

    project_dir: Path
    plugin_dirs: List[Path] = field(default_factory=list)


def _options(args: BuildArgs) -> EngineOptions:
    options = EngineOptions.from_env()
    return options.with_overrides(
        unknown_mnemonic=UnknownMnemonicPolicy.ERROR if args.strict_mnemonics else None,
        step_completion=StepCompletionPolicy.DETACHED if args.detach_steps else None,
        plugin_dirs=tuple(args.plugin_dirs) + options.plugin_dirs if args.plugin_dirs else None,
    )


def _load_description(args: BuildArgs) -> BuildDescription:
    description = BuildDescription.load(args.project_dir)
    if args.target:
        description.target = args.target
    return description


def build_command(args: BuildArgs) -> None:
    """Build the project: expand, bind, resolve and execute all steps."""
    log_header("gembs Build System", __version__)

    try:
        description = _load_description(args)
        log(f"Building project: {description.name}")
        orchestrator = BuildOrchestrator(options=_options(args), verbose=True)
        # build() logs the failure cause itself
        result = orchestrator.build(args.project_dir, description=description)
    except GembsError as e:
        log_error(str(e))
        log_error("Build failed!")
        sys.exit(1)
    except KeyboardInterrupt:
        log_error("Build interrupted")
        sys.exit(130)

    if not result.success:
        log_error("Build failed!")
        sys.exit(1)

    log_success("Build successful!")
    log(result.message)
    for step in result.executed_steps:
        log_detail(f"ran {step}", verbose_only=True)
    log_build_complete(result.build_time)
    sys.exit(0)


def resolve_command(args: BuildArgs) -> None:
    """Resolve the build without executing it and print the result as JSON.

    Plugin preprocessing hooks still run, so their side effects (such as the
    scratch directory) happen.
    """
    try:
        description = _load_description(args)
        prepared = BuildOrchestrator(options=_options(args)).prepare(args.project_dir, description=description)
    except GembsError as e:
        log_error(str(e))
        sys.exit(1)

    print(json.dumps(prepared.description.to_dict(), indent=2))
    sys.exit(0)


def plugins_command(args: PluginsArgs) -> None:
    """List discovered plugins, in lookup order."""
    options = EngineOptions.from_env()
    extra_dirs = list(args.plugin_dirs) + list(options.plugin_dirs)
    registry = PluginRegistry.for_project(args.project_dir.resolve(), extra_dirs)
    for resource in registry.resources:
        print(f"{resource.key:<16} {resource.origin}")
    sys.exit(0)


def _add_project_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory containing build.json (default: current directory)",
    )
    parser.add_argument(
        "--plugin-dir",
        dest="plugin_dirs",
        action="append",
        type=Path,
        default=[],
        help="Additional plugin directory, searched before <project>/plugins (repeatable)",
    )


def _add_build_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Compiler/toolchain selector (overrides 'target' in build.json)",
    )
    parser.add_argument(
        "--strict-mnemonics",
        action="store_true",
        help="Fail on unknown $mnemonics instead of dropping the token",
    )
    parser.add_argument(
        "--detach-steps",
        action="store_true",
        help="Do not wait for processes started by a step before running the next one",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the gembs CLI."""
    parser = argparse.ArgumentParser(
        prog="gembs",
        description="gembs - plugin-driven build orchestrator",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gembs {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    build_parser = subparsers.add_parser("build", help="Build the project")
    _add_project_dir(build_parser)
    _add_build_options(build_parser)

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the resolved build description without executing steps",
    )
    _add_project_dir(resolve_parser)
    _add_build_options(resolve_parser)

    plugins_parser = subparsers.add_parser("plugins", help="List discovered plugins")
    _add_project_dir(plugins_parser)

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if not parsed_args.project_dir.exists():
        print(f"\033[1;31m✗ Error: Path does not exist: {parsed_args.project_dir}\033[0m")
        sys.exit(2)
    if not parsed_args.project_dir.is_dir():
        print(f"\033[1;31m✗ Error: Path is not a directory: {parsed_args.project_dir}\033[0m")
        sys.exit(2)

    if parsed_args.command == "plugins":
        plugins_command(PluginsArgs(project_dir=parsed_args.project_dir, plugin_dirs=parsed_args.plugin_dirs))
        return

    args = BuildArgs(
        project_dir=parsed_args.project_dir,
        target=parsed_args.target,
        strict_mnemonics=parsed_args.strict_mnemonics,
        detach_steps=parsed_args.detach_steps,
        plugin_dirs=parsed_args.plugin_dirs,
        verbose=parsed_args.verbose,
    )
    configure_logging(verbose=args.verbose, use_stderr=parsed_args.command == "resolve")

    if parsed_args.command == "build":
        build_command(args)
    elif parsed_args.command == "resolve":
        resolve_command(args)


if __name__ == "__main__":
    main()
