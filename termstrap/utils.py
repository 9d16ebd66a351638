"""Utility functions for termstrap."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Literal

import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

# Initialize rich console
console = Console()
logger = logging.getLogger(__name__)

Level = Literal["info", "success", "warning", "error"]

_LEVEL_STYLES: dict[str, tuple[str, str]] = {
    "info": ("INFO", "blue"),
    "success": ("SUCCESS", "green"),
    "warning": ("WARNING", "yellow"),
    "error": ("ERROR", "bold red"),
}

Runner = Callable[[str], None]


class CommandError(RuntimeError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        """Initialize the CommandError."""
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {command}")


def log(message: str, level: Level = "info") -> None:
    """Print a message with a colored level prefix."""
    label, style = _LEVEL_STYLES[level]
    console.print(f"[{style}]\\[{label}][/{style}] {escape(message)}", highlight=False)


def setup_logging(verbose: bool = False) -> None:  # noqa: FBT001, FBT002
    """Configure logging level based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def command_exists(name: str) -> bool:
    """Check whether an executable is available on PATH."""
    return shutil.which(name) is not None


def run_command(command: str) -> None:
    """Run a shell command, raising CommandError when it fails."""
    logger.debug("Running: %s", command)
    result = subprocess.run(command, shell=True, check=False)  # noqa: S602
    if result.returncode != 0:
        raise CommandError(command, result.returncode)


def command_succeeds(command: str) -> bool:
    """Run a command quietly and report whether it exited with status 0."""
    result = subprocess.run(  # noqa: S602
        command,
        shell=True,
        check=False,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


def dry_run_command(command: str) -> None:
    """Print a command instead of running it."""
    console.print(f"[dim]$ {escape(command)}[/dim]", highlight=False)


def quote(path: str | Path) -> str:
    """Quote a path for use inside a shell command."""
    return shlex.quote(str(path))


def prepend_to_path(directory: Path) -> None:
    """Prepend a directory to PATH for the current process."""
    current = os.environ.get("PATH", "")
    if str(directory) not in current.split(os.pathsep):
        os.environ["PATH"] = f"{directory}{os.pathsep}{current}"


def ask_yes_no(question: str, *, default: bool) -> bool:
    """Ask a yes/no question; an empty answer returns the default."""
    hint = "[Y/n]" if default else "[y/N]"
    answer = console.input(f"{question} {escape(hint)} ").strip().lower()
    if not answer:
        return default
    return answer.startswith("y")


def get_latest_release(repo: str) -> dict:
    """Get the latest release information from GitHub."""
    url = f"https://api.github.com/repos/{repo}/releases/latest"
    logger.debug("Fetching latest release from %s", url)
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.json()


def fetch_text(url: str) -> str:
    """Fetch a text document over HTTP."""
    logger.debug("Fetching %s", url)
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.text


def download_file(url: str, destination: str | Path) -> Path:
    """Download a file from a URL to a destination path."""
    console.print(f"📥 [blue]Downloading from {url}[/blue]")
    destination = Path(destination)
    try:
        response = requests.get(url, stream=True, timeout=30)
        response.raise_for_status()

        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                f.write(chunk)

        return destination
    except requests.RequestException as e:
        msg = f"Failed to download {url}: {e}"
        raise RuntimeError(msg) from e


def extract_archive(archive_path: str | Path, dest_dir: str | Path) -> None:
    """Extract a .tar.gz or .zip archive to a destination directory."""
    archive_path = str(archive_path)
    is_gzip = False
    with open(archive_path, "rb") as f:
        if f.read(2) == b"\x1f\x8b":
            is_gzip = True

    if is_gzip or archive_path.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, mode="r:gz") as tar:
            tar.extractall(path=dest_dir, filter="data")
    elif archive_path.endswith(".zip"):
        with zipfile.ZipFile(archive_path) as zip_file:
            zip_file.extractall(path=dest_dir)  # noqa: S202
    else:
        msg = f"Unsupported archive format: {archive_path}"
        raise ValueError(msg)
