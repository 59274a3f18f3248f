"""Assembly of the engine command line for an automation run."""

from __future__ import annotations

from pathlib import Path

# Flags that keep the editor headless and route its full log to stdout
ENGINE_FLAGS = (
    "-stdout",
    "-FullStdOutLogOutput",
    "-Unattended",
    "-NoPause",
    "-NoSplash",
    "-NoSound",
    "-NullRHI",
)


def build_engine_command(
    editor: Path,
    uproject: Path,
    test_pattern: str,
) -> list[str]:
    """Build the argv that runs the automation tests matching a pattern.

    Args:
        editor: Path to the editor executable.
        uproject: Path to the project's .uproject file.
        test_pattern: Automation test filter, e.g. ``Project.Inventory``.

    Returns:
        Argument list suitable for ``asyncio.create_subprocess_exec``.
    """
    return [
        str(editor),
        str(uproject),
        f"-ExecCmds=Automation RunTests {test_pattern};Quit",
        *ENGINE_FLAGS,
    ]
