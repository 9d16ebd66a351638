"""Detection of the host operating system, distribution and login shell."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

OS_RELEASE = Path("/etc/os-release")

DISTRO_FAMILIES: dict[str, tuple[str, ...]] = {
    "debian": ("ubuntu", "debian", "pop", "linuxmint"),
    "arch": ("arch", "manjaro", "endeavouros"),
    "fedora": ("fedora",),
}


class OperatingSystem(str, Enum):
    """Operating systems termstrap knows how to set up."""

    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


class Shell(str, Enum):
    """Login shells termstrap can configure."""

    ZSH = "zsh"
    BASH = "bash"
    FISH = "fish"
    OTHER = "other"


@dataclass(frozen=True)
class HostProfile:
    """Snapshot of the host, taken once at startup."""

    operating_system: OperatingSystem
    current_shell: Shell
    linux_distro: str | None = None
    machine: str = ""

    @property
    def is_macos(self) -> bool:
        return self.operating_system is OperatingSystem.MACOS

    @property
    def is_linux(self) -> bool:
        return self.operating_system is OperatingSystem.LINUX

    @property
    def is_apple_silicon(self) -> bool:
        """True on macOS running on an arm64 CPU."""
        return self.is_macos and self.machine == "arm64"

    @property
    def distro_family(self) -> str | None:
        """Package-manager family of the Linux distribution, if known."""
        if not self.is_linux or self.linux_distro is None:
            return None
        for family, distros in DISTRO_FAMILIES.items():
            if self.linux_distro in distros:
                return family
        return None


def detect_operating_system(ostype: str | None = None) -> OperatingSystem:
    """Classify a platform identifier such as ``$OSTYPE`` or ``sys.platform``."""
    if ostype is None:
        ostype = os.environ.get("OSTYPE") or sys.platform
    ostype = ostype.lower()
    if ostype.startswith("darwin"):
        return OperatingSystem.MACOS
    if ostype.startswith("linux-gnu") or ostype == "linux":
        return OperatingSystem.LINUX
    return OperatingSystem.UNKNOWN


def detect_linux_distro(os_release: Path = OS_RELEASE) -> str:
    """Return the ``ID`` field of an os-release file, or ``unknown``."""
    try:
        content = os_release.read_text()
    except FileNotFoundError:
        return "unknown"

    for line in content.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key == "ID":
            return value.strip().strip("\"'") or "unknown"
    return "unknown"


def is_apple_silicon(profile: HostProfile) -> bool:
    return profile.is_apple_silicon


def detect_current_shell(shell_path: str | None = None) -> Shell:
    """Derive the shell from the basename of the login shell path."""
    if shell_path is None:
        shell_path = os.environ.get("SHELL", "")
    name = Path(shell_path).name
    try:
        shell = Shell(name)
    except ValueError:
        return Shell.OTHER
    return shell


def detect_host_profile(
    ostype: str | None = None,
    shell_path: str | None = None,
    os_release: Path = OS_RELEASE,
) -> HostProfile:
    """Build the HostProfile for the running machine."""
    operating_system = detect_operating_system(ostype)
    distro = None
    if operating_system is OperatingSystem.LINUX:
        distro = detect_linux_distro(os_release)
    return HostProfile(
        operating_system=operating_system,
        current_shell=detect_current_shell(shell_path),
        linux_distro=distro,
        machine=platform.machine(),
    )
