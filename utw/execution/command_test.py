"""Tests for engine command assembly."""

from __future__ import annotations

from pathlib import Path

from utw.execution.command import ENGINE_FLAGS, build_engine_command


class TestBuildEngineCommand:
    def test_command_line(self):
        cmd = build_engine_command(
            Path("/ue/Engine/Binaries/Linux/UnrealEditor"),
            Path("/proj/Game.uproject"),
            "Project.Inventory",
        )
        assert cmd[0] == "/ue/Engine/Binaries/Linux/UnrealEditor"
        assert cmd[1] == "/proj/Game.uproject"
        assert cmd[2] == "-ExecCmds=Automation RunTests Project.Inventory;Quit"
        assert cmd[3:] == list(ENGINE_FLAGS)

    def test_log_goes_to_stdout(self):
        cmd = build_engine_command(Path("e"), Path("p.uproject"), "X")
        assert "-stdout" in cmd
        assert "-FullStdOutLogOutput" in cmd
