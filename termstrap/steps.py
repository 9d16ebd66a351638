"""The ordered setup pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

import requests
from rich.markup import escape

from .config import SetupConfig
from .host import HostProfile, Shell
from .install import Installer, ToolSpec, load_tool_table
from .rcfile import ConfigureOutcome, ConfirmReset, configure_for_profile
from .utils import (
    Runner,
    command_exists,
    console,
    download_file,
    fetch_text,
    log,
    prepend_to_path,
    quote,
    run_command,
)

logger = logging.getLogger(__name__)

HOMEBREW_INSTALL = (
    '/bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)
HOMEBREW_SHELLENV = 'eval "$(/opt/homebrew/bin/brew shellenv)"'
HOMEBREW_BIN = Path("/opt/homebrew/bin")

LINUX_INDEX_REFRESH = {
    "debian": "sudo apt update",
    "arch": "sudo pacman -Sy",
    "fedora": "sudo dnf check-update || true",
}

ALACRITTY_CONFIG = """\
import = ["~/.config/alacritty/themes/themes/coolnight.toml"]

[env]
TERM = "xterm-256color"

[window]
padding = { x = 10, y = 10 }
decorations = "Buttonless"
opacity = 0.7
blur = true
option_as_alt = "Both"

[font]
normal = { family = "FiraCode Nerd Font", style = "Regular" }
size = 18
"""


class StepStatus(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of one pipeline step."""

    title: str
    status: StepStatus
    error: Exception | None = None


@dataclass
class SetupContext:
    """Everything a step needs, built once by the CLI."""

    profile: HostProfile
    home: Path
    config: SetupConfig = field(default_factory=SetupConfig)
    runner: Runner = run_command
    confirm_reset: ConfirmReset = lambda _path: False
    dry_run: bool = False
    tools: dict[str, ToolSpec] = field(default_factory=dict)
    installer: Installer = field(init=False)

    def __post_init__(self) -> None:
        if not self.tools:
            self.tools = load_tool_table(self.config.tools_file)
        self.installer = Installer(
            self.profile,
            self.config,
            self.home,
            self.runner,
            dry_run=self.dry_run,
        )

    def install(self, tool: str) -> bool:
        return self.installer.install(self.tools[tool])

    def clone(self, repo: str, dest: Path) -> None:
        self.runner(f"git clone {quote(repo)} {quote(dest)}")

    def fetch_to(self, url: str, dest: Path) -> None:
        if self.dry_run:
            self.runner(f"curl -fsSL {quote(url)} -o {quote(dest)}")
        else:
            download_file(url, dest)

    def mkdir(self, path: Path) -> None:
        if not self.dry_run:
            path.mkdir(parents=True, exist_ok=True)

    def append_line(self, path: Path, line: str) -> None:
        if self.dry_run:
            self.runner(f"echo {quote(line)} >> {quote(path)}")
            return
        with open(path, "a") as f:
            f.write(f"{line}\n")

    def write_file(self, path: Path, content: str) -> None:
        if self.dry_run:
            log(f"Dry run: would write {path}", "warning")
            return
        path.write_text(content)
        log(f"Wrote {path}", "success")


def setup_package_manager(ctx: SetupContext) -> StepStatus:
    profile = ctx.profile
    if profile.is_macos:
        if command_exists("brew"):
            log("Homebrew already installed, skipping...")
            return StepStatus.SKIPPED
        ctx.runner(HOMEBREW_INSTALL)
        if profile.is_apple_silicon:
            ctx.append_line(ctx.home / ".zprofile", HOMEBREW_SHELLENV)
            prepend_to_path(HOMEBREW_BIN)
        return StepStatus.DONE

    command = LINUX_INDEX_REFRESH.get(profile.distro_family or "")
    if command is None:
        log("No package index to refresh on this host, skipping...")
        return StepStatus.SKIPPED
    ctx.runner(command)
    return StepStatus.DONE


def install_font(ctx: SetupContext) -> StepStatus:
    return StepStatus.DONE if ctx.install("font") else StepStatus.SKIPPED


def install_alacritty(ctx: SetupContext) -> StepStatus:
    if not ctx.profile.is_macos:
        log("Skipping (macOS only)...")
        return StepStatus.SKIPPED
    return StepStatus.DONE if ctx.install("alacritty") else StepStatus.SKIPPED


def configure_alacritty(ctx: SetupContext) -> StepStatus:
    if not ctx.profile.is_macos:
        log("Skipping (macOS only)...")
        return StepStatus.SKIPPED

    alacritty_dir = ctx.home / ".config" / "alacritty"
    themes_dir = alacritty_dir / "themes"
    ctx.mkdir(alacritty_dir)

    if not (themes_dir / ".git").is_dir():
        ctx.clone(ctx.config.alacritty_theme_repo, themes_dir)
    ctx.mkdir(themes_dir / "themes")

    theme = themes_dir / "themes" / "coolnight.toml"
    if not theme.is_file():
        ctx.fetch_to(ctx.config.alacritty_theme_url, theme)

    config_file = alacritty_dir / "alacritty.toml"
    if not config_file.is_file():
        ctx.write_file(config_file, ALACRITTY_CONFIG)
    return StepStatus.DONE


def install_starship(ctx: SetupContext) -> StepStatus:
    installed = ctx.install("starship")

    log("Configuring Starship...")
    config_dir = ctx.home / ".config"
    ctx.mkdir(config_dir)
    starship_toml = config_dir / "starship.toml"
    if starship_toml.is_file():
        return StepStatus.DONE if installed else StepStatus.SKIPPED

    try:
        if ctx.dry_run:
            ctx.fetch_to(ctx.config.starship_config_url, starship_toml)
        else:
            starship_toml.write_text(fetch_text(ctx.config.starship_config_url))
        log("Starship config downloaded", "success")
    except requests.RequestException as e:
        logger.debug("Starship config download failed: %s", e)
        log("Config download failed, using default preset", "warning")
        ctx.runner(f"starship preset {ctx.config.starship_preset} -o {quote(starship_toml)}")
    return StepStatus.DONE


def install_eza(ctx: SetupContext) -> StepStatus:
    return StepStatus.DONE if ctx.install("eza") else StepStatus.SKIPPED


def install_zoxide(ctx: SetupContext) -> StepStatus:
    return StepStatus.DONE if ctx.install("zoxide") else StepStatus.SKIPPED


def install_atuin(ctx: SetupContext) -> StepStatus:
    # the atuin installer puts its binary in ~/.atuin/bin
    prepend_to_path(ctx.home / ".atuin" / "bin")
    return StepStatus.DONE if ctx.install("atuin") else StepStatus.SKIPPED


def install_tmux(ctx: SetupContext) -> StepStatus:
    ctx.install("tmux")
    ctx.install("bash")

    tmux_conf = ctx.home / ".tmux.conf"
    if not tmux_conf.is_file():
        ctx.fetch_to(ctx.config.tmux_config_url, tmux_conf)

    tpm_dir = ctx.home / ".tmux" / "plugins" / "tpm"
    if not tpm_dir.is_dir():
        ctx.clone(ctx.config.tpm_repo, tpm_dir)
    return StepStatus.DONE


def install_zsh_plugins(ctx: SetupContext) -> StepStatus:
    if ctx.profile.current_shell is not Shell.ZSH:
        log("Skipping (zsh only)...")
        return StepStatus.SKIPPED

    plugin_dir = ctx.home / ".zsh"
    ctx.mkdir(plugin_dir)
    status = StepStatus.SKIPPED
    for name, repo in ctx.config.zsh_plugins.items():
        if (plugin_dir / name).is_dir():
            log(f"{name} already installed, skipping...")
            continue
        ctx.clone(repo, plugin_dir / name)
        log(f"{name} installed", "success")
        status = StepStatus.DONE
    return status


def configure_shell_step(ctx: SetupContext) -> StepStatus:
    outcome = configure_for_profile(
        ctx.profile,
        ctx.home,
        ctx.confirm_reset,
        marker=ctx.config.marker,
        history_size=ctx.config.history_size,
        dry_run=ctx.dry_run,
    )
    if outcome in (None, ConfigureOutcome.SKIPPED):
        return StepStatus.SKIPPED
    return StepStatus.DONE


def print_summary(ctx: SetupContext) -> StepStatus:
    profile = ctx.profile
    zsh = profile.current_shell is Shell.ZSH

    console.print("\n" + "=" * 46)
    console.print("[green]Setup Complete![/green]")
    console.print("=" * 46 + "\n")
    console.print("Installed:")
    installed = [
        "FiraCode Nerd Font",
        "Alacritty (with coolnight theme)" if profile.is_macos else None,
        "Starship",
        "eza (better ls)",
        "zoxide (better cd)",
        "atuin (better history)",
        "tmux + tpm",
        "zsh-syntax-highlighting" if zsh else None,
        "zsh-autosuggestions" if zsh else None,
    ]
    for item in installed:
        if item:
            console.print(f"  ✓ {item}")

    console.print("\nConfig files:")
    console.print("  ~/.config/starship.toml")
    if profile.is_macos:
        console.print("  ~/.config/alacritty/alacritty.toml")
    console.print("  ~/.tmux.conf")

    console.print("\nNext steps:")
    console.print(f"  1. Restart terminal or: exec {profile.current_shell.value}")
    if not profile.is_macos:
        console.print("  2. Set terminal font to 'FiraCode Nerd Font'")
    console.print("  3. In tmux: prefix + Shift-I to install plugins")
    console.print("\nCustomize: https://starship.rs/config/\n")
    return StepStatus.DONE


Step = Callable[[SetupContext], StepStatus]

STEPS: list[tuple[str, Step]] = [
    ("Setting up package manager", setup_package_manager),
    ("Installing FiraCode Nerd Font", install_font),
    ("Installing Alacritty", install_alacritty),
    ("Configuring Alacritty", configure_alacritty),
    ("Installing Starship", install_starship),
    ("Installing eza", install_eza),
    ("Installing zoxide", install_zoxide),
    ("Installing atuin", install_atuin),
    ("Installing tmux", install_tmux),
    ("Installing zsh plugins (syntax-highlighting, autosuggestions)", install_zsh_plugins),
    ("Configuring shell", configure_shell_step),
    ("Finishing up", print_summary),
]


def run_steps(
    ctx: SetupContext,
    steps: list[tuple[str, Step]] | None = None,
    *,
    keep_going: bool = False,
) -> list[StepResult]:
    """Run the pipeline in order.

    A failing step is recorded as a FAILED result. Unless ``keep_going`` is
    set, no further steps run after the first failure.
    """
    steps = STEPS if steps is None else steps
    results: list[StepResult] = []
    total = len(steps)

    for i, (title, step) in enumerate(steps, start=1):
        console.print(f"\n[bold]{escape(f'[{i}/{total}]')} {title}...[/bold]", highlight=False)
        try:
            status = step(ctx)
        except Exception as e:  # noqa: BLE001
            log(f"{title} failed: {e}", "error")
            logger.debug("Step failure", exc_info=True)
            results.append(StepResult(title, StepStatus.FAILED, e))
            if not keep_going:
                break
            continue
        results.append(StepResult(title, status))

    return results
