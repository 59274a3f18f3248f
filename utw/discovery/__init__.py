"""Project, engine, and configuration discovery."""

from utw.discovery.config import WrapperConfig
from utw.discovery.engine import (
    BuildConfiguration,
    find_uproject,
    resolve_editor,
    resolve_engine_dir,
)

__all__ = [
    "BuildConfiguration",
    "WrapperConfig",
    "find_uproject",
    "resolve_editor",
    "resolve_engine_dir",
]
