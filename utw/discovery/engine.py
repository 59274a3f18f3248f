"""Locate the Unreal project, the engine installation, and the editor binary.

The engine is found from, in order:

1. An explicit engine directory (``--engine-dir`` or ``engineDir``).
2. The ``EngineAssociation`` of the .uproject file, looked up in the
   launcher's registry of installed builds (Windows registry, or
   ``Install.ini`` on macOS and Linux).
3. The enclosing engine source tree, when the project lives inside one
   (a path component named ``Engine`` or ``Templates``).
"""

from __future__ import annotations

import configparser
import enum
import json
import platform
from pathlib import Path

# Registry key listing engine builds registered with the launcher (Windows)
BUILDS_REGISTRY_KEY = r"Software\Epic Games\Unreal Engine\Builds"

# Install.ini location relative to the home directory, per platform
INSTALL_INI_PATHS = {
    "Darwin": Path("Library", "Application Support", "Epic", "UnrealEngine", "Install.ini"),
    "Linux": Path(".config", "Epic", "UnrealEngine", "Install.ini"),
}

# Binaries subdirectory and executable extension, per platform
BINARY_PLATFORMS = {
    "Windows": ("Win64", ".exe"),
    "Darwin": ("Mac", ""),
    "Linux": ("Linux", ""),
}

EDITOR_NAMES = ("UE4Editor", "UnrealEditor")


class BuildConfiguration(str, enum.Enum):
    DEBUG = "Debug"
    DEBUG_GAME = "DebugGame"
    DEVELOPMENT = "Development"
    TEST = "Test"
    SHIPPING = "Shipping"


def find_uproject(project_dir: Path) -> Path:
    """Return the single .uproject file in *project_dir*.

    Raises:
        ValueError: If the directory holds zero or several .uproject files.
    """
    uprojects = sorted(p for p in project_dir.iterdir() if p.suffix == ".uproject")
    if len(uprojects) != 1:
        raise ValueError("Run in a directory that only has one .uproject file")
    return uprojects[0]


def read_engine_association(uproject: Path) -> str | None:
    """Read the ``EngineAssociation`` field of a .uproject file.

    Raises:
        ValueError: If the file is not valid JSON.
    """
    try:
        data = json.loads(uproject.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {uproject.name}: {e}") from e
    if not isinstance(data, dict):
        return None
    return data.get("EngineAssociation") or None


def _engine_from_source_tree(project_dir: Path) -> Path:
    parts = project_dir.parts
    for marker in ("Engine", "Templates"):
        if marker in parts:
            index = parts.index(marker)
            return Path(*parts[: index + 1]).parent
    raise ValueError(
        "Need to specify EngineAssociation in the uproject file or run in an "
        "engine directory"
    )


def _engine_from_registry(association: str) -> Path:
    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, BUILDS_REGISTRY_KEY) as key:
            value, _ = winreg.QueryValueEx(key, association)
    except OSError:
        raise RuntimeError(
            f"Could not find the installed engine version {association}"
        )
    return Path(value)


def _engine_from_install_ini(association: str, install_ini: Path) -> Path:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment]
    try:
        parser.read_string(install_ini.read_text(encoding="utf-8-sig"))
    except (OSError, configparser.Error):
        raise RuntimeError(
            f"Could not find the installed engine version {association}"
        )
    if not parser.has_option("Installations", association):
        raise RuntimeError(
            f"Could not find the installed engine version {association}"
        )
    return Path(parser.get("Installations", association))


def resolve_engine_dir(
    project_dir: Path,
    uproject: Path,
    engine_dir: Path | None = None,
    system: str | None = None,
    home: Path | None = None,
) -> Path:
    """Find the engine installation used by a project.

    Args:
        project_dir: Directory containing the .uproject file.
        uproject: The .uproject file.
        engine_dir: Explicitly configured engine directory, if any.
        system: ``platform.system()`` value; detected when omitted.
        home: Home directory holding the launcher's Install.ini.

    Returns:
        The engine root directory (the one containing ``Engine/``).

    Raises:
        ValueError: If the configuration does not identify an engine.
        RuntimeError: If the associated engine is not installed.
    """
    if engine_dir is not None:
        if not engine_dir.exists():
            raise ValueError(f"Engine directory {engine_dir} does not exist")
        return engine_dir

    association = read_engine_association(uproject)
    if association is None:
        return _engine_from_source_tree(project_dir)

    system = system or platform.system()
    if system == "Windows":
        return _engine_from_registry(association)
    if system in INSTALL_INI_PATHS:
        home = home or Path.home()
        return _engine_from_install_ini(association, home / INSTALL_INI_PATHS[system])
    raise RuntimeError(f"Unsupported platform: {system}")


def editor_suffix(build_configuration: str, system: str) -> str:
    """Executable suffix for a build configuration, e.g. ``-Win64-DebugGame.exe``."""
    label, extension = BINARY_PLATFORMS[system]
    if build_configuration == BuildConfiguration.DEVELOPMENT.value:
        return extension
    return f"-{label}-{build_configuration}{extension}"


def resolve_editor(
    engine_dir: Path,
    build_configuration: str = BuildConfiguration.DEVELOPMENT.value,
    system: str | None = None,
) -> Path:
    """Find the editor executable of an engine installation.

    Both the UE4 (``UE4Editor``) and UE5 (``UnrealEditor``) names are tried.

    Raises:
        RuntimeError: If the platform has no editor binaries.
        FileNotFoundError: If neither executable exists.
    """
    system = system or platform.system()
    if system not in BINARY_PLATFORMS:
        raise RuntimeError(f"Unsupported platform: {system}")
    label, _ = BINARY_PLATFORMS[system]
    suffix = editor_suffix(build_configuration, system)
    binaries = engine_dir / "Engine" / "Binaries" / label

    for name in EDITOR_NAMES:
        candidate = binaries / f"{name}{suffix}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(
        f"Could not find UE4Editor{suffix} or UnrealEditor{suffix} for engine "
        f"version located at {engine_dir}"
    )
