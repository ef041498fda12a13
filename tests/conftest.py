# SPDX-License-Identifier: MIT
"""Shared fixtures: a fake Visual Studio layout and a fake subprocess.run."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from tests.dumps import VCVARSALL_OUTPUT


class FakeToolchain:
    """A Visual Studio layout on disk plus a stand-in for subprocess.run."""

    def __init__(self, root: Path, output: str = VCVARSALL_OUTPUT) -> None:
        self.program_files_x86 = root / "Program Files (x86)"
        self.vswhere = (
            self.program_files_x86 / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
        )
        self.installation = root / "VS" / "2022" / "Community"
        self.vcvarsall = self.installation / "VC" / "Auxiliary" / "Build" / "vcvarsall.bat"
        self.windir = root / "Windows"
        self.output = output
        self.returncode = 0
        self.calls: list[list[str]] = []

        self.vswhere.parent.mkdir(parents=True)
        self.vswhere.write_bytes(b"")
        self.vcvarsall.parent.mkdir(parents=True)
        self.vcvarsall.write_bytes(b"")

    @property
    def environ(self) -> dict[str, str]:
        return {
            "ProgramFiles(x86)": str(self.program_files_x86),
            "WINDIR": str(self.windir),
            "VCVARS_TARGET_ARCH": "x86_64",
        }

    @property
    def vswhere_calls(self) -> list[list[str]]:
        return [cmd for cmd in self.calls if cmd[0] == str(self.vswhere)]

    @property
    def cmd_calls(self) -> list[list[str]]:
        return [cmd for cmd in self.calls if cmd[0] != str(self.vswhere)]

    def run(self, cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[bytes]:
        self.calls.append(cmd)
        if cmd[0] == str(self.vswhere):
            stdout = f"{self.installation}\r\n".encode()
            return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr=b"")
        return subprocess.CompletedProcess(
            cmd, self.returncode, stdout=self.output.encode("utf-8"), stderr=b""
        )


@pytest.fixture
def fake_toolchain(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    """A fake toolchain with subprocess.run patched to answer for it."""
    toolchain = FakeToolchain(tmp_path / "toolchain")
    monkeypatch.setattr(subprocess, "run", toolchain.run)
    return toolchain
