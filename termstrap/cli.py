"""Command-line interface for termstrap."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from . import __version__
from .config import SetupConfig
from .host import HostProfile, detect_host_profile
from .steps import SetupContext, StepStatus, run_steps
from .utils import ask_yes_no, dry_run_command, log, run_command, setup_logging

# Initialize rich console
console = Console()
logger = logging.getLogger(__name__)


def print_banner(profile: HostProfile) -> None:
    """Print the banner with the detected host."""
    console.print("")
    console.print("=" * 46)
    console.print("  termstrap - Starship setup")
    console.print("=" * 46)
    console.print("")
    log(f"Detected OS: {profile.operating_system.value}")
    if profile.is_linux:
        log(f"Detected distro: {profile.linux_distro}")
    log(f"Detected shell: {profile.current_shell.value}")
    console.print("")


def confirm_reset(path: Path) -> bool:
    """Ask whether an existing run-control file should be reset."""
    console.print("")
    return ask_yes_no(
        f"[yellow]\\[QUESTION][/yellow] {path} already exists. Reset it?",
        default=False,
    )


def setup(args: argparse.Namespace, config: SetupConfig) -> int:
    """Detect the host, confirm, and run every setup step."""
    profile = detect_host_profile()
    print_banner(profile)

    if not args.yes and not ask_yes_no("Proceed with installation?", default=True):
        return 0

    context = SetupContext(
        profile=profile,
        home=Path(args.home).expanduser() if args.home else Path.home(),
        config=config,
        runner=dry_run_command if args.dry_run else run_command,
        confirm_reset=confirm_reset,
        dry_run=args.dry_run,
    )
    results = run_steps(context, keep_going=args.keep_going)

    failed = [r for r in results if r.status is StepStatus.FAILED]
    if failed:
        console.print(
            f"\n❌ [bold red]{len(failed)} step(s) failed: "
            f"{', '.join(r.title for r in failed)}[/bold red]",
        )
        return 1
    return 0


def show_version(_args: argparse.Namespace, _config: SetupConfig) -> int:
    console.print(f"[yellow]termstrap[/] [bold]v{__version__}[/]")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="termstrap",
        description="termstrap - Install and configure a Starship terminal setup",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip the initial confirmation prompt",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the remaining steps after a failure",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print external commands instead of running them",
    )
    parser.add_argument(
        "--config-file",
        type=str,
        help="Path to a YAML file overriding URLs and settings",
    )
    parser.add_argument(
        "--home",
        type=str,
        help="Home directory to configure (defaults to the current user's)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # version command
    version_parser = subparsers.add_parser("version", help="Print version information")
    version_parser.set_defaults(func=show_version)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main function to parse arguments and execute commands."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)

    try:
        config = SetupConfig.load_from_file(args.config_file)
        command = getattr(args, "func", setup)
        exit_code = command(args, config)
    except KeyboardInterrupt:
        console.print("\n⚠️ [yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"❌ [bold red]Error: {e!s}[/bold red]")
        if args.verbose:
            console.print_exception()
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
