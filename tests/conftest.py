"""
Pytest configuration and shared fixtures for QtKit tests.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from qtkit.core.process import ToolResult, ToolRunner
from qtkit.qt.version import QtVersion


# ============================================================================
# Fake Tool Runner
# ============================================================================


@dataclass
class RecordedCall:
    """One command run through FakeRunner."""

    command: List[str]
    cwd: Optional[Path]
    env: Optional[Dict[str, str]]
    capture: bool

    @property
    def program(self) -> str:
        return Path(self.command[0]).name


class FakeRunner(ToolRunner):
    """
    ToolRunner that records commands instead of running them.

    Exit codes are configured per program name (e.g. 'curl'): either a single
    code used for every call, or a list consumed one call at a time (the last
    entry repeats). Effects are callables run on success to simulate what the
    tool leaves on disk.
    """

    def __init__(self):
        self.calls: List[RecordedCall] = []
        self.exit_codes: Dict[str, object] = {}
        self.stdout: Dict[str, str] = {}
        self.effects: Dict[str, Callable[[List[str], Optional[Path]], None]] = {}

    def run(self, command, cwd=None, env=None, capture=False) -> ToolResult:
        cmd = [str(part) for part in command]
        call = RecordedCall(cmd, Path(cwd) if cwd else None, env, capture)
        self.calls.append(call)

        code = self._next_exit_code(call.program)
        if code == 0 and call.program in self.effects:
            self.effects[call.program](cmd, call.cwd)

        return ToolResult(
            command=tuple(cmd), exit_code=code, stdout=self.stdout.get(call.program, "")
        )

    def _next_exit_code(self, program: str) -> int:
        codes = self.exit_codes.get(program, 0)
        if isinstance(codes, list):
            if len(codes) > 1:
                return codes.pop(0)
            return codes[0]
        return codes

    def calls_to(self, program: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.program == program]


# ============================================================================
# Simulated Tools
# ============================================================================


GITMODULES = """[submodule "qtbase"]
\tpath = qtbase
\turl = ../qtbase.git
\tbranch = 5.12.3
\tstatus = essential
[submodule "qtdeclarative"]
\tpath = qtdeclarative
\turl = ../qtdeclarative.git
\tbranch = 5.12.3
[submodule "qtwebengine"]
\tpath = qtwebengine
\turl = ../qtwebengine.git
\tqt = false
"""


def make_qt_tree(root: Path, modules=("base", "declarative", "webengine"), gitmodules=GITMODULES) -> Path:
    """Create a fake unpacked Qt source tree."""
    root.mkdir(parents=True, exist_ok=True)
    for name in modules:
        (root / f"qt{name}").mkdir(exist_ok=True)
    if gitmodules is not None:
        (root / ".gitmodules").write_text(gitmodules)
    (root / "configure").write_text("#!/bin/sh\n")
    return root


def make_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    os.chmod(path, 0o755)
    return path


def _curl_effect(command: List[str], cwd: Optional[Path]) -> None:
    output = command[command.index("--output") + 1]
    (cwd / output).write_bytes(b"archive")


def _tar_effect(command: List[str], cwd: Optional[Path]) -> None:
    destination = Path(command[command.index("-C") + 1])
    archive = Path(command[-1])
    make_qt_tree(destination / archive.name[: -len(".tar.xz")])


def _configure_effect(command: List[str], cwd: Optional[Path]) -> None:
    make_executable(cwd / "qtbase" / "bin" / "qmake")


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner that records calls and succeeds without side effects."""
    return FakeRunner()


@pytest.fixture
def simulating_runner() -> FakeRunner:
    """Runner whose curl, tar and configure leave the expected files behind."""
    runner = FakeRunner()
    runner.effects["curl"] = _curl_effect
    runner.effects["tar"] = _tar_effect
    runner.effects["configure"] = _configure_effect
    return runner


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    """Empty download cache directory."""
    path = tmp_path / "download_cache"
    path.mkdir()
    return path


@pytest.fixture
def qt_5_12(cache_dir) -> QtVersion:
    return QtVersion.parse("5.12.3", cache_dir)


@pytest.fixture
def qt_5_9(cache_dir) -> QtVersion:
    return QtVersion.parse("5.9", cache_dir)


@pytest.fixture
def qt_tree_factory() -> Callable[..., Path]:
    """Factory creating fake unpacked Qt trees: qt_tree_factory(path, modules, gitmodules)."""
    return make_qt_tree


@pytest.fixture
def executable_factory() -> Callable[[Path], Path]:
    """Factory creating executable stub files."""
    return make_executable
