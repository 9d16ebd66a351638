"""Table-driven installation of terminal tools."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

import requests
import yaml

from .utils import (
    Runner,
    command_exists,
    command_succeeds,
    download_file,
    extract_archive,
    get_latest_release,
    log,
    quote,
    run_command,
)

if TYPE_CHECKING:
    from .config import SetupConfig
    from .host import HostProfile

logger = logging.getLogger(__name__)

PYTHON_PREFIX = "python:"
EZA_ASSET = "eza_x86_64-unknown-linux-gnu.tar.gz"


class InstallError(Exception):
    """A tool could not be installed."""


@dataclass
class ToolSpec:
    """One row of the install dispatch table."""

    name: str
    description: str = ""
    binary: str | None = None
    check: dict[str, str] = field(default_factory=dict)
    install: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: dict) -> ToolSpec:
        check = data.get("check") or {}
        if isinstance(check, str):
            check = {"any": check}
        return cls(
            name=name,
            description=data.get("description", name),
            binary=data.get("binary"),
            check=dict(check),
            install=dict(data.get("install") or {}),
        )


def load_tool_table(path: Path) -> dict[str, ToolSpec]:
    """Load the install dispatch table from YAML."""
    with open(path) as file:
        data = yaml.safe_load(file) or {}
    tools = data.get("tools") or {}
    return {name: ToolSpec.from_dict(name, spec) for name, spec in tools.items()}


def profile_keys(profile: HostProfile) -> list[str]:
    """Table keys that apply to ``profile``, most specific first."""
    if profile.is_macos:
        return ["macos", "any"]
    if profile.is_linux:
        keys = [profile.distro_family] if profile.distro_family else []
        return [*keys, "linux", "any"]
    return ["any"]


def _lookup(table: dict[str, str], profile: HostProfile) -> str | None:
    for key in profile_keys(profile):
        if key in table:
            return table[key]
    return None


def resolve_install_command(spec: ToolSpec, profile: HostProfile) -> str | None:
    """Return the install command for ``spec`` on this host, if any."""
    return _lookup(spec.install, profile)


def resolve_check_command(spec: ToolSpec, profile: HostProfile) -> str | None:
    return _lookup(spec.check, profile)


class Installer:
    """Runs install commands from the dispatch table for one host."""

    def __init__(  # noqa: PLR0913
        self,
        profile: HostProfile,
        config: SetupConfig,
        home: Path,
        runner: Runner = run_command,
        *,
        dry_run: bool = False,
    ) -> None:
        self.profile = profile
        self.config = config
        self.home = home
        self.runner = runner
        self.dry_run = dry_run
        self.python_installers: dict[str, Callable[[], None]] = {
            "nerd_font": self.install_nerd_font,
            "eza_release": self.install_eza_release,
        }

    def is_installed(self, spec: ToolSpec) -> bool:
        if spec.binary and command_exists(spec.binary):
            return True
        check = resolve_check_command(spec, self.profile)
        return check is not None and command_succeeds(check)

    def install(self, spec: ToolSpec) -> bool:
        """Install ``spec`` unless it is already present.

        Returns True when an install command ran.
        """
        command = resolve_install_command(spec, self.profile)
        if command is None:
            log(f"{spec.description}: not needed on this host, skipping...")
            return False
        if self.is_installed(spec):
            log(f"{spec.description}: already installed, skipping...")
            return False

        if command.startswith(PYTHON_PREFIX):
            name = command[len(PYTHON_PREFIX) :]
            if name not in self.python_installers:
                msg = f"Unknown built-in installer '{name}' for {spec.name}"
                raise InstallError(msg)
            if self.dry_run:
                self.runner(f"# built-in installer: {name}")
            else:
                self.python_installers[name]()
        else:
            self.runner(command)

        log(f"{spec.description} installed", "success")
        return True

    def install_nerd_font(self) -> None:
        """Download the Nerd Font archive into the user's font directory."""
        fonts_dir = self.home / ".local" / "share" / "fonts" / self.config.font_dir_name
        fonts_dir.mkdir(parents=True, exist_ok=True)
        temp_dir = Path(tempfile.mkdtemp())
        try:
            archive = download_file(self.config.font_archive_url, temp_dir / "FiraCode.zip")
            extract_archive(archive, fonts_dir)
        except (RuntimeError, ValueError) as e:
            msg = f"Could not install font: {e}"
            raise InstallError(msg) from e
        finally:
            shutil.rmtree(temp_dir)
        self.runner("fc-cache -f > /dev/null 2>&1")

    def install_eza_release(self) -> None:
        """Install the latest eza release binary into /usr/local/bin."""
        try:
            release = get_latest_release(self.config.eza_repo)
        except requests.RequestException as e:
            msg = f"Could not look up the latest eza release: {e}"
            raise InstallError(msg) from e
        asset = next(
            (a for a in release.get("assets", []) if a["name"] == EZA_ASSET),
            None,
        )
        if asset is None:
            msg = f"No {EZA_ASSET} asset in release {release.get('tag_name')}"
            raise InstallError(msg)

        temp_dir = Path(tempfile.mkdtemp())
        try:
            archive = download_file(asset["browser_download_url"], temp_dir / EZA_ASSET)
            extract_archive(archive, temp_dir / "extracted")
            matches = list((temp_dir / "extracted").glob("**/eza"))
            if not matches:
                msg = f"eza binary not found in {EZA_ASSET}"
                raise InstallError(msg)
            self.runner(f"sudo install -m 755 {quote(matches[0])} /usr/local/bin/eza")
        except RuntimeError as e:
            msg = f"Could not install eza: {e}"
            raise InstallError(msg) from e
        finally:
            shutil.rmtree(temp_dir)
