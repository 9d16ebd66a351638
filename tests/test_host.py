"""Tests for host detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from termstrap.host import (
    HostProfile,
    OperatingSystem,
    Shell,
    detect_current_shell,
    detect_host_profile,
    detect_linux_distro,
    detect_operating_system,
    is_apple_silicon,
)


@pytest.mark.parametrize(
    ("ostype", "expected"),
    [
        ("darwin", OperatingSystem.MACOS),
        ("darwin23", OperatingSystem.MACOS),
        ("darwin22.6.0", OperatingSystem.MACOS),
        ("linux-gnu", OperatingSystem.LINUX),
        ("linux-gnueabihf", OperatingSystem.LINUX),
        ("linux", OperatingSystem.LINUX),
        ("linux-musl", OperatingSystem.UNKNOWN),
        ("msys", OperatingSystem.UNKNOWN),
        ("cygwin", OperatingSystem.UNKNOWN),
        ("freebsd14.0", OperatingSystem.UNKNOWN),
        ("win32", OperatingSystem.UNKNOWN),
        ("", OperatingSystem.UNKNOWN),
    ],
)
def test_detect_operating_system(ostype: str, expected: OperatingSystem) -> None:
    assert detect_operating_system(ostype) is expected


def test_detect_operating_system_prefers_ostype(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OSTYPE", "darwin23")
    assert detect_operating_system() is OperatingSystem.MACOS


def test_detect_operating_system_falls_back_to_sys_platform(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("OSTYPE", raising=False)
    monkeypatch.setattr("termstrap.host.sys.platform", "darwin")
    assert detect_operating_system() is OperatingSystem.MACOS


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ('NAME="Ubuntu"\nID=ubuntu\nID_LIKE=debian\n', "ubuntu"),
        ('ID_LIKE="rhel centos"\nID="fedora"\n', "fedora"),
        ("ID='arch'\n", "arch"),
        ('NAME="Mystery Linux"\n', "unknown"),
        ("", "unknown"),
    ],
)
def test_detect_linux_distro(tmp_path: Path, content: str, expected: str) -> None:
    os_release = tmp_path / "os-release"
    os_release.write_text(content)
    assert detect_linux_distro(os_release) == expected


def test_detect_linux_distro_missing_file(tmp_path: Path) -> None:
    assert detect_linux_distro(tmp_path / "does-not-exist") == "unknown"


@pytest.mark.parametrize(
    ("operating_system", "machine", "expected"),
    [
        (OperatingSystem.MACOS, "arm64", True),
        (OperatingSystem.MACOS, "x86_64", False),
        (OperatingSystem.LINUX, "arm64", False),
        (OperatingSystem.LINUX, "aarch64", False),
    ],
)
def test_is_apple_silicon(
    operating_system: OperatingSystem,
    machine: str,
    expected: bool,  # noqa: FBT001
) -> None:
    profile = HostProfile(operating_system, Shell.ZSH, machine=machine)
    assert is_apple_silicon(profile) is expected


@pytest.mark.parametrize(
    ("shell_path", "expected"),
    [
        ("/bin/zsh", Shell.ZSH),
        ("/usr/local/bin/fish", Shell.FISH),
        ("/bin/bash", Shell.BASH),
        ("/opt/homebrew/bin/bash", Shell.BASH),
        ("/bin/tcsh", Shell.OTHER),
        ("/bin/sh", Shell.OTHER),
        ("", Shell.OTHER),
    ],
)
def test_detect_current_shell(shell_path: str, expected: Shell) -> None:
    assert detect_current_shell(shell_path) is expected


def test_detect_current_shell_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHELL", "/usr/bin/fish")
    assert detect_current_shell() is Shell.FISH
    monkeypatch.delenv("SHELL")
    assert detect_current_shell() is Shell.OTHER


@pytest.mark.parametrize(
    ("distro", "family"),
    [
        ("ubuntu", "debian"),
        ("pop", "debian"),
        ("linuxmint", "debian"),
        ("endeavouros", "arch"),
        ("manjaro", "arch"),
        ("fedora", "fedora"),
        ("gentoo", None),
        ("unknown", None),
    ],
)
def test_distro_family(distro: str, family: str | None) -> None:
    profile = HostProfile(OperatingSystem.LINUX, Shell.BASH, linux_distro=distro)
    assert profile.distro_family == family


def test_distro_family_off_linux() -> None:
    profile = HostProfile(OperatingSystem.MACOS, Shell.ZSH, linux_distro="ubuntu")
    assert profile.distro_family is None


def test_detect_host_profile(tmp_path: Path) -> None:
    os_release = tmp_path / "os-release"
    os_release.write_text("ID=fedora\n")

    profile = detect_host_profile(
        ostype="linux-gnu",
        shell_path="/bin/zsh",
        os_release=os_release,
    )

    assert profile.operating_system is OperatingSystem.LINUX
    assert profile.linux_distro == "fedora"
    assert profile.current_shell is Shell.ZSH
    assert profile.machine


def test_detect_host_profile_macos_has_no_distro(tmp_path: Path) -> None:
    os_release = tmp_path / "os-release"
    os_release.write_text("ID=ubuntu\n")

    profile = detect_host_profile(ostype="darwin23", shell_path="/bin/zsh", os_release=os_release)

    assert profile.is_macos
    assert profile.linux_distro is None


def test_host_profile_is_immutable() -> None:
    profile = HostProfile(OperatingSystem.LINUX, Shell.ZSH)
    with pytest.raises(AttributeError):
        profile.current_shell = Shell.BASH  # type: ignore[misc]


def test_detect_host_profile_without_uname(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delattr("termstrap.host.os.uname", raising=False)
    monkeypatch.setattr("termstrap.host.platform.machine", lambda: "AMD64")

    profile = detect_host_profile(
        ostype="win32",
        shell_path="",
        os_release=tmp_path / "missing",
    )

    assert profile.operating_system is OperatingSystem.UNKNOWN
    assert profile.current_shell is Shell.OTHER
    assert profile.machine == "AMD64"
