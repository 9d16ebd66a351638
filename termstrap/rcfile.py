"""Idempotent writer for shell run-control files.

A run-control file is configured by appending a fixed block of
initialization snippets. A marker substring inside the file means the block
was already written, so running termstrap again leaves the file alone. Any
existing file is copied to a timestamped backup before it is changed.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from .host import HostProfile, Shell
from .utils import log

logger = logging.getLogger(__name__)

MARKER = "starship init"
BACKUP_TIME_FORMAT = "%Y%m%d_%H%M%S"

AUTOSUGGESTIONS_LINE = (
    '[ -f "$HOME/.zsh/zsh-autosuggestions/zsh-autosuggestions.zsh" ]'
    ' && source "$HOME/.zsh/zsh-autosuggestions/zsh-autosuggestions.zsh"'
)
SYNTAX_HIGHLIGHTING_LINE = (
    '[ -f "$HOME/.zsh/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh" ]'
    ' && source "$HOME/.zsh/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh"'
)

ConfirmReset = Callable[[Path], bool]


class ConfigureOutcome(str, Enum):
    """What configure_shell did to the run-control file."""

    CREATED = "created"
    APPENDED = "appended"
    RESET = "reset"
    SKIPPED = "skipped"


@dataclass
class RcFile:
    """State of a run-control file before it is configured."""

    path: Path
    exists: bool
    already_configured: bool

    @classmethod
    def inspect(cls, path: Path, marker: str = MARKER) -> RcFile:
        if not path.is_file():
            return cls(path=path, exists=False, already_configured=False)
        content = path.read_text(errors="replace")
        return cls(path=path, exists=True, already_configured=marker in content)


def backup_file(path: Path, now: datetime | None = None) -> Path:
    """Copy ``path`` to ``<path>.backup.<timestamp>`` and return the copy."""
    stamp = (now or datetime.now()).strftime(BACKUP_TIME_FORMAT)
    backup = path.with_name(f"{path.name}.backup.{stamp}")
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}.backup.{stamp}_{counter}")
        counter += 1
    shutil.copy2(path, backup)
    log(f"Backup created: {backup}")
    return backup


def render_init_block(
    shell: Shell,
    init_command: str,
    plugins_enabled: bool,  # noqa: FBT001
    history_size: int = 1000,
) -> str:
    """Render the block appended to a POSIX-style run-control file.

    The syntax-highlighting plugin wraps the line editor, so when plugins are
    enabled its source line is always the last line of the block.
    """
    name = shell.value
    sections = [
        f"\n# ---- Starship ----\n{init_command}\n",
        "\n# ---- Zoxide (only if installed) ----\n"
        "if command -v zoxide &> /dev/null; then\n"
        f'    eval "$(zoxide init {name})"\n'
        '    alias cd="z"\n'
        "fi\n",
        "\n# ---- Aliases ----\n"
        "if command -v eza &> /dev/null; then\n"
        '    alias ls="eza --icons=always"\n'
        "fi\n",
        "\n# ---- Atuin (better history) ----\n"
        'export PATH="$HOME/.atuin/bin:$PATH"\n'
        "if command -v atuin &> /dev/null; then\n"
        f'    eval "$(atuin init {name})"\n'
        "fi\n",
        f"\n# ---- History ----\nHISTSIZE={history_size}\nSAVEHIST={history_size}\n",
    ]
    if plugins_enabled:
        sections.append(f"\n# ---- Autosuggestions ----\n{AUTOSUGGESTIONS_LINE}\n")
        sections.append(
            "\n# ---- Syntax Highlighting (must be at the end) ----\n"
            f"{SYNTAX_HIGHLIGHTING_LINE}\n",
        )
    return "".join(sections)


def render_fish_block() -> str:
    """Render the block appended to fish's config.fish."""
    return (
        "\n# ---- Starship ----\n"
        "starship init fish | source\n"
        "\n# ---- Zoxide (must be before alias) ----\n"
        "zoxide init fish | source\n"
        "\n# ---- Aliases (after zoxide init so 'z' command exists) ----\n"
        'alias ls="eza --icons=always"\n'
        'alias cd="z"\n'
        "\n# ---- Atuin ----\n"
        "atuin init fish | source\n"
    )


def _write_block(rc_path: Path, block: str) -> None:
    rc_path.parent.mkdir(parents=True, exist_ok=True)
    with open(rc_path, "a") as f:
        f.write(block)


def _apply_block(
    rc_path: Path,
    block: str,
    confirm_reset: ConfirmReset,
    marker: str,
    dry_run: bool = False,  # noqa: FBT001, FBT002
) -> ConfigureOutcome:
    rc = RcFile.inspect(rc_path, marker)
    outcome = ConfigureOutcome.CREATED

    if rc.exists:
        if confirm_reset(rc_path):
            outcome = ConfigureOutcome.RESET
        elif rc.already_configured:
            log("Already configured, skipping...")
            return ConfigureOutcome.SKIPPED
        else:
            outcome = ConfigureOutcome.APPENDED

    if dry_run:
        log(f"Dry run: {rc_path} left untouched (would be {outcome.value})", "warning")
        return outcome

    if rc.exists:
        backup_file(rc_path)
    if outcome is ConfigureOutcome.RESET:
        rc_path.unlink()
        log(f"Resetting {rc_path}...")

    _write_block(rc_path, block)
    logger.debug("Wrote %d bytes to %s (%s)", len(block), rc_path, outcome.value)
    log(f"Shell configured: {rc_path}", "success")
    return outcome


def configure_shell(  # noqa: PLR0913
    rc_path: Path,
    init_command: str,
    plugins_enabled: bool,  # noqa: FBT001
    confirm_reset: ConfirmReset,
    shell: Shell = Shell.ZSH,
    marker: str = MARKER,
    history_size: int = 1000,
    dry_run: bool = False,  # noqa: FBT001, FBT002
) -> ConfigureOutcome:
    """Append the initialization block to ``rc_path`` unless already present.

    An existing file is offered for reset first. A confirmed reset backs the
    file up and starts it over. A declined reset leaves a file containing
    ``marker`` untouched, and otherwise backs it up and appends. With
    ``dry_run`` the outcome is reported but nothing is written.
    """
    block = render_init_block(shell, init_command, plugins_enabled, history_size)
    return _apply_block(rc_path, block, confirm_reset, marker, dry_run)


def configure_fish(
    config_path: Path,
    confirm_reset: ConfirmReset,
    marker: str = MARKER,
    dry_run: bool = False,  # noqa: FBT001, FBT002
) -> ConfigureOutcome:
    """Configure fish's config.fish with the same reset/backup rules."""
    return _apply_block(config_path, render_fish_block(), confirm_reset, marker, dry_run)


def rc_path_for(shell: Shell, home: Path) -> Path | None:
    """Return the run-control file termstrap writes for ``shell``."""
    return {
        Shell.ZSH: home / ".zshrc",
        Shell.BASH: home / ".bashrc",
        Shell.FISH: home / ".config" / "fish" / "config.fish",
    }.get(shell)


def configure_for_profile(
    profile: HostProfile,
    home: Path,
    confirm_reset: ConfirmReset,
    marker: str = MARKER,
    history_size: int = 1000,
    *,
    dry_run: bool = False,
) -> ConfigureOutcome | None:
    """Configure the run-control file of the profile's login shell.

    Returns None when the shell is not one termstrap supports.
    """
    shell = profile.current_shell
    rc_path = rc_path_for(shell, home)
    if rc_path is None:
        log(f"Shell '{shell.value}' is not supported, skipping...", "warning")
        return None
    if shell is Shell.FISH:
        return configure_fish(rc_path, confirm_reset, marker, dry_run)
    return configure_shell(
        rc_path,
        f'eval "$(starship init {shell.value})"',
        plugins_enabled=shell is Shell.ZSH,
        confirm_reset=confirm_reset,
        shell=shell,
        marker=marker,
        history_size=history_size,
        dry_run=dry_run,
    )
