"""Wrapper configuration file management.

Reads the optional ``utw.json`` file from the working directory.  Values in
the file provide defaults for command-line options that were not given
explicitly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

CONFIG_FILE_NAME = "utw.json"

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "buildConfiguration": "Development",
    "projectDir": None,
    "engineDir": None,
}


class WrapperConfig:
    """Manages the utw.json configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    @classmethod
    def from_directory(cls, directory: Path) -> WrapperConfig:
        """Load ``utw.json`` from *directory*, if present."""
        return cls(directory / CONFIG_FILE_NAME)

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)
            return
        if isinstance(data, dict):
            self._data = {**DEFAULT_CONFIG, **data}

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def build_configuration(self) -> str:
        """Get the editor build configuration name."""
        return str(
            self._data.get("buildConfiguration")
            or DEFAULT_CONFIG["buildConfiguration"]
        )

    @property
    def project_dir(self) -> Path | None:
        """Get the project directory, resolved against the config file location."""
        val = self._data.get("projectDir")
        if not val:
            return None
        base = self.path.parent if self.path is not None else Path.cwd()
        return (base / val).resolve()

    @property
    def engine_dir(self) -> Path | None:
        """Get the engine installation directory (None = discover)."""
        val = self._data.get("engineDir")
        return Path(val) if val else None
