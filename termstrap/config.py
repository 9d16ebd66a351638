"""Configuration management for termstrap."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

TOOLS_FILE = Path(__file__).parent / "tools.yaml"


@dataclass
class SetupConfig:
    """Locations and constants used by the setup steps."""

    starship_config_url: str = (
        "https://gist.githubusercontent.com/Ba-koD/"
        "9c7888b1cc74e31b671f5bc2c26bca8e/raw/starship.toml"
    )
    starship_preset: str = "bracketed-segments"
    font_archive_url: str = (
        "https://github.com/ryanoasis/nerd-fonts/releases/latest/download/FiraCode.zip"
    )
    font_dir_name: str = "FiraCodeNerdFont"
    alacritty_theme_repo: str = "https://github.com/alacritty/alacritty-theme"
    alacritty_theme_url: str = (
        "https://raw.githubusercontent.com/josean-dev/dev-environment-files/"
        "main/.config/alacritty/themes/themes/coolnight.toml"
    )
    tmux_config_url: str = (
        "https://raw.githubusercontent.com/josean-dev/dev-environment-files/"
        "main/.tmux.conf"
    )
    tpm_repo: str = "https://github.com/tmux-plugins/tpm"
    zsh_plugins: dict[str, str] = field(
        default_factory=lambda: {
            "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting.git",
            "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions.git",
        },
    )
    eza_repo: str = "eza-community/eza"
    marker: str = "starship init"
    history_size: int = 1000
    tools_file: Path = TOOLS_FILE

    @classmethod
    def load_from_file(cls, config_path: str | None = None) -> SetupConfig:
        """Load configuration overrides from a YAML file."""
        if not config_path:
            return cls()

        try:
            with open(os.path.expanduser(config_path)) as file:
                config_data = yaml.safe_load(file) or {}
        except FileNotFoundError:
            console.print(
                f"⚠️ [yellow]Configuration file not found: {config_path}[/yellow]",
            )
            return cls()
        except yaml.YAMLError:
            console.print(
                f"❌ [bold red]Invalid YAML in configuration file: {config_path}[/bold red]",
            )
            logger.debug("YAML error", exc_info=True)
            return cls()

        if not isinstance(config_data, dict):
            console.print(
                f"❌ [bold red]Configuration file must contain a mapping: {config_path}[/bold red]",
            )
            return cls()

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SetupConfig:
        """Build a configuration from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                console.print(f"⚠️ [yellow]Ignoring unknown configuration key '{key}'[/yellow]")

        values = {key: value for key, value in data.items() if key in known}
        if isinstance(values.get("tools_file"), str):
            values["tools_file"] = Path(os.path.expanduser(values["tools_file"]))
        return cls(**values)
