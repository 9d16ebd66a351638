"""Configuration for pytest fixtures used in termstrap tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from termstrap.host import HostProfile, OperatingSystem, Shell


class CommandRecorder:
    """Runner that records commands instead of executing them."""

    def __init__(self) -> None:
        self.commands: list[str] = []

    def __call__(self, command: str) -> None:
        self.commands.append(command)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def recorder() -> CommandRecorder:
    return CommandRecorder()


@pytest.fixture
def make_profile() -> Callable[..., HostProfile]:
    """Return a factory for HostProfile values."""

    def _make_profile(
        operating_system: str = "linux",
        shell: str = "zsh",
        distro: str | None = "ubuntu",
        machine: str = "x86_64",
    ) -> HostProfile:
        os_enum = OperatingSystem(operating_system)
        return HostProfile(
            operating_system=os_enum,
            current_shell=Shell(shell),
            linux_distro=distro if os_enum is OperatingSystem.LINUX else None,
            machine=machine,
        )

    return _make_profile


@pytest.fixture
def no_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend that no tool is installed on the machine."""
    monkeypatch.setattr("termstrap.install.command_exists", lambda _name: False)
    monkeypatch.setattr("termstrap.install.command_succeeds", lambda _cmd: False)
    monkeypatch.setattr("termstrap.steps.command_exists", lambda _name: False)


@pytest.fixture(autouse=True)
def restore_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Undo PATH changes made by the setup steps."""
    monkeypatch.setenv("PATH", os.environ.get("PATH", ""))
