"""Entry point for the Unreal test wrapper.

Locates the project and engine, runs the editor in automation mode for the
given test pattern, and renders its log as live test progress.  The wrapper
exits with the editor's own exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console

from utw.discovery.config import WrapperConfig
from utw.discovery.engine import (
    BuildConfiguration,
    find_uproject,
    resolve_editor,
    resolve_engine_dir,
)
from utw.execution.command import build_engine_command
from utw.execution.dispatch import DispatchLoop
from utw.execution.runner import run_engine
from utw.reporting.aggregator import RunAggregator
from utw.reporting.status_sink import ConsoleStatusSink

__version__ = "1.0.0"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Options that can also come from utw.json default to None so that an
    explicit flag can be told apart from the built-in default.
    """
    parser = argparse.ArgumentParser(
        prog="utw",
        description="Unreal Test Wrapper bootstraps and beautifies Unreal "
                    "automation tests. Call from the directory of your "
                    "uproject file.",
    )
    parser.add_argument(
        "test_pattern",
        help="The test pattern to use for Unreal Automation",
    )
    parser.add_argument(
        "-b", "--build-configuration",
        choices=[c.value for c in BuildConfiguration],
        default=None,
        help="The build configuration to use "
             f"(default: {BuildConfiguration.DEVELOPMENT.value})",
    )
    parser.add_argument(
        "-p", "--project-dir",
        type=Path,
        default=None,
        help="Path to the base of the Unreal project to use "
             "(default: current directory)",
    )
    parser.add_argument(
        "--engine-dir",
        type=Path,
        default=None,
        help="Path to the base of the Unreal Engine installation to use",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colorized output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def resolve_options(
    args: argparse.Namespace,
    config: WrapperConfig,
    cwd: Path,
) -> tuple[str, Path, Path | None]:
    """Merge CLI flags with utw.json values; explicit flags win.

    Returns:
        Tuple of (build configuration, project directory, engine directory).
    """
    build_configuration = args.build_configuration or config.build_configuration
    if build_configuration not in {c.value for c in BuildConfiguration}:
        raise ValueError(f"Unknown build configuration: {build_configuration}")

    if args.project_dir is not None:
        project_dir = (cwd / args.project_dir).resolve()
    else:
        project_dir = config.project_dir or cwd

    engine_dir = args.engine_dir if args.engine_dir is not None else config.engine_dir
    return build_configuration, project_dir, engine_dir


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    cwd = Path.cwd()
    config = WrapperConfig.from_directory(cwd)

    console = Console(no_color=args.no_color, highlight=False)
    console.print()

    try:
        build_configuration, project_dir, engine_dir = resolve_options(args, config, cwd)
        uproject = find_uproject(project_dir)
        engine_dir = resolve_engine_dir(project_dir, uproject, engine_dir)
        editor = resolve_editor(engine_dir, build_configuration)
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    command = build_engine_command(editor, uproject, args.test_pattern)

    sink = ConsoleStatusSink(console)
    aggregator = RunAggregator(sink, args.test_pattern)
    dispatch = DispatchLoop(aggregator)
    try:
        summary = asyncio.run(run_engine(command, aggregator, dispatch))
    except OSError as e:
        print(f"Error: could not start {editor}: {e}", file=sys.stderr)
        return 1
    finally:
        sink.close()

    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
