"""Unit tests for the config module."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from utw.discovery.config import CONFIG_FILE_NAME, DEFAULT_CONFIG, WrapperConfig


class TestWrapperConfigCreate:
    """Tests for creating WrapperConfig instances."""

    def test_no_path_uses_defaults(self):
        """No path gives default config values."""
        cfg = WrapperConfig(None)
        assert cfg.build_configuration == DEFAULT_CONFIG["buildConfiguration"]
        assert cfg.project_dir is None
        assert cfg.engine_dir is None

    def test_missing_file_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = WrapperConfig.from_directory(Path(tmpdir))
            assert cfg.config == DEFAULT_CONFIG

    def test_load_from_file(self):
        """Config is loaded from utw.json."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / CONFIG_FILE_NAME
            path.write_text(json.dumps({
                "buildConfiguration": "DebugGame",
                "projectDir": "Game",
                "engineDir": "/opt/UnrealEngine",
            }))
            cfg = WrapperConfig(path)
            assert cfg.build_configuration == "DebugGame"
            assert cfg.project_dir == (Path(tmpdir) / "Game").resolve()
            assert cfg.engine_dir == Path("/opt/UnrealEngine")

    def test_partial_file_fills_defaults(self):
        """Missing keys in the config file are filled from defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / CONFIG_FILE_NAME
            path.write_text(json.dumps({"engineDir": "/opt/ue"}))
            cfg = WrapperConfig(path)
            assert cfg.build_configuration == "Development"
            assert cfg.engine_dir == Path("/opt/ue")

    def test_corrupted_file_uses_defaults(self):
        """Corrupted JSON falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / CONFIG_FILE_NAME
            path.write_text("{ invalid json }")
            cfg = WrapperConfig(path)
            assert cfg.config == DEFAULT_CONFIG

    def test_non_object_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / CONFIG_FILE_NAME
            path.write_text("[1, 2, 3]")
            cfg = WrapperConfig(path)
            assert cfg.config == DEFAULT_CONFIG
