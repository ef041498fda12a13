# SPDX-License-Identifier: MIT
"""Tests for vcvars.toolchains.msvc."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vcvars.configure.config import VcvarsConfig
from vcvars.core.envdump import SEPARATOR
from vcvars.core.errors import (
    MissingEnvVarDependencyError,
    ToolchainFileNotFoundError,
    UnsupportedArchError,
)
from vcvars.toolchains.msvc import (
    ArchSelector,
    ToolchainLocation,
    find_installation,
    run_vcvarsall,
    vcvarsall_command,
    vswhere_command,
)


class TestArchSelector:
    @pytest.mark.parametrize(
        ("host", "target", "expected"),
        [
            ("x86", "x86", "x86"),
            ("x86", "x86_64", "x86_x64"),
            ("x86", "arm", "x86_arm"),
            ("x86", "aarch64", "x86_arm64"),
            ("x86_64", "x86", "x64_x86"),
            ("x86_64", "x86_64", "x64"),
            ("x86_64", "arm", "x64_arm"),
            ("x86_64", "aarch64", "x64_arm64"),
            ("aarch64", "x86", "arm64_x86"),
            ("aarch64", "x86_64", "arm64_x64"),
            ("aarch64", "arm", "arm64_arm"),
            ("aarch64", "aarch64", "arm64"),
        ],
    )
    def test_table(self, host, target, expected):
        assert ArchSelector().select(host, target) == expected

    def test_aliases(self):
        selector = ArchSelector()
        assert selector.select("AMD64", "arm64") == "x64_arm64"
        assert selector.select("i686", "x64") == "x86_x64"

    def test_prefer_x86_host_tools(self):
        selector = ArchSelector(prefer_x86_host_tools=True)
        assert selector.select("x86_64", "x86_64") == "x86_x64"
        assert selector.select("x86_64", "x86") == "x86"
        assert selector.select("x86_64", "aarch64") == "x86_arm64"
        # Other hosts are unaffected.
        assert selector.select("aarch64", "aarch64") == "arm64"

    def test_unsupported_target(self):
        with pytest.raises(UnsupportedArchError) as exc_info:
            ArchSelector().select("x86_64", "riscv64")
        assert exc_info.value.target == "riscv64"

    def test_unsupported_host(self):
        with pytest.raises(UnsupportedArchError):
            ArchSelector().select("arm", "x86_64")


class TestToolchainLocation:
    def _config(self, environ) -> VcvarsConfig:
        return VcvarsConfig.create(environ=environ)

    def test_from_config(self, tmp_path: Path):
        vswhere = tmp_path / "pf" / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
        vswhere.parent.mkdir(parents=True)
        vswhere.write_bytes(b"")
        location = ToolchainLocation.from_config(
            self._config({"ProgramFiles(x86)": str(tmp_path / "pf"), "WINDIR": "C:\\Windows"})
        )
        assert location.vswhere == vswhere
        assert location.cmd_exe == Path("C:\\Windows") / "System32" / "cmd.exe"
        assert location.vcvarsall is None

    def test_missing_program_files(self):
        with pytest.raises(MissingEnvVarDependencyError):
            ToolchainLocation.from_config(self._config({"WINDIR": "C:\\Windows"}))

    def test_empty_value_counts_as_missing(self):
        with pytest.raises(MissingEnvVarDependencyError):
            ToolchainLocation.from_config(
                self._config({"ProgramFiles(x86)": "", "WINDIR": "C:\\Windows"})
            )

    def test_vswhere_must_be_a_file(self, tmp_path: Path):
        vswhere = tmp_path / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
        vswhere.mkdir(parents=True)
        with pytest.raises(ToolchainFileNotFoundError):
            ToolchainLocation.from_config(
                self._config({"ProgramFiles(x86)": str(tmp_path), "WINDIR": "C:\\Windows"})
            )

    def test_with_installation(self, tmp_path: Path):
        vcvarsall = tmp_path / "VC" / "Auxiliary" / "Build" / "vcvarsall.bat"
        vcvarsall.parent.mkdir(parents=True)
        vcvarsall.write_bytes(b"")
        location = ToolchainLocation(vswhere=Path("vswhere.exe"), cmd_exe=Path("cmd.exe"))
        found = location.with_installation(tmp_path)
        assert found.installation == tmp_path
        assert found.vcvarsall == vcvarsall
        assert location.vcvarsall is None

    def test_with_installation_missing_script(self, tmp_path: Path):
        location = ToolchainLocation(vswhere=Path("vswhere.exe"), cmd_exe=Path("cmd.exe"))
        with pytest.raises(ToolchainFileNotFoundError, match="vcvarsall.bat"):
            location.with_installation(tmp_path)


class TestVswhere:
    def test_default_command(self):
        assert vswhere_command(Path("vswhere.exe")) == [
            "vswhere.exe",
            "-prerelease",
            "-latest",
            "-property",
            "installationPath",
            "-utf8",
        ]

    def test_empty_override_drops_latest(self):
        cmd = vswhere_command(Path("vswhere.exe"), [])
        assert "-latest" not in cmd

    @patch("subprocess.run")
    def test_output_is_stripped(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(
            stdout="  C:\\Program Files\\VS\\2022 ü\r\n".encode(), returncode=0
        )
        location = ToolchainLocation(vswhere=Path("vswhere.exe"), cmd_exe=Path("cmd.exe"))
        assert find_installation(location) == Path("C:\\Program Files\\VS\\2022 ü")


class TestVcvarsallCommand:
    def test_escapes_script_path(self):
        location = ToolchainLocation(
            vswhere=Path("vswhere.exe"),
            cmd_exe=Path("cmd.exe"),
            installation=Path("R&D^2"),
            vcvarsall=Path("R&D^2/vcvarsall.bat"),
        )
        cmd = vcvarsall_command(location, "x64")
        assert cmd[2] == str(Path("R^&D^^2/vcvarsall.bat"))
        assert cmd[5] == f"echo.{SEPARATOR}"

    def test_requires_located_script(self):
        location = ToolchainLocation(vswhere=Path("vswhere.exe"), cmd_exe=Path("cmd.exe"))
        with pytest.raises(ValueError):
            vcvarsall_command(location, "x64")


class TestRunVcvarsall:
    @patch("subprocess.run")
    def test_logs_installation(self, mock_run: MagicMock, caplog):
        mock_run.return_value = MagicMock(stdout=f"{SEPARATOR}\nFOO=bar\n".encode(), returncode=0)
        location = ToolchainLocation(
            vswhere=Path("vswhere.exe"),
            cmd_exe=Path("cmd.exe"),
            installation=Path("VS2022"),
            vcvarsall=Path("VS2022/vcvarsall.bat"),
        )
        with caplog.at_level(logging.INFO, logger="vcvars.toolchains.msvc"):
            output = run_vcvarsall(location, "x64")
        assert "FOO=bar" in output
        assert "Running vcvarsall.bat x64 from VS2022" in caplog.text
