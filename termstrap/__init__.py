"""termstrap - Terminal environment bootstrapper.

Installs a Starship-based terminal setup (Nerd Font, Alacritty, eza, zoxide,
atuin, tmux and zsh plugins) on macOS and Linux, and appends the matching
initialization snippets to the user's shell run-control file. Running it again
leaves an already configured setup untouched.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly used functions
from .config import SetupConfig
from .host import (
    HostProfile,
    OperatingSystem,
    Shell,
    detect_current_shell,
    detect_host_profile,
    detect_linux_distro,
    detect_operating_system,
    is_apple_silicon,
)
from .install import InstallError, Installer, ToolSpec, load_tool_table, resolve_install_command
from .rcfile import ConfigureOutcome, backup_file, configure_fish, configure_shell
from .steps import SetupContext, StepResult, StepStatus, run_steps
from .cli import main

__all__ = [
    "ConfigureOutcome",
    "HostProfile",
    "InstallError",
    "Installer",
    "OperatingSystem",
    "SetupConfig",
    "SetupContext",
    "Shell",
    "StepResult",
    "StepStatus",
    "ToolSpec",
    "backup_file",
    "configure_fish",
    "configure_shell",
    "detect_current_shell",
    "detect_host_profile",
    "detect_linux_distro",
    "detect_operating_system",
    "is_apple_silicon",
    "load_tool_table",
    "main",
    "resolve_install_command",
    "run_steps",
]
