"""Utility functions for KVM/VirtualBox switching."""

import sys
import subprocess
from typing import Optional

# Informational output is suppressed when set (see --quiet)
_QUIET = False


class Colors:
    """Terminal colors for better readability."""
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    BOLD = '\033[1m'
    ENDC = '\033[0m'


def set_quiet(quiet: bool) -> None:
    """Enable or disable quiet mode for informational messages."""
    global _QUIET
    _QUIET = quiet


def is_quiet() -> bool:
    return _QUIET


def log_info(message: str) -> None:
    """Print an informational message."""
    if not _QUIET:
        print(f"{Colors.BLUE}{Colors.BOLD}[INFO]{Colors.ENDC} {message}")


def log_success(message: str) -> None:
    """Print a success message."""
    if not _QUIET:
        print(f"{Colors.GREEN}{Colors.BOLD}[SUCCESS]{Colors.ENDC} {message}")


def log_warning(message: str) -> None:
    """Print a warning message to stderr."""
    print(f"{Colors.YELLOW}{Colors.BOLD}[WARNING]{Colors.ENDC} {message}", file=sys.stderr)


def log_error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"{Colors.RED}{Colors.BOLD}[ERROR]{Colors.ENDC} {message}", file=sys.stderr)


def log_debug(message: str, debug: bool = False) -> None:
    """Print a debug message if debug mode is enabled."""
    if debug:
        print(f"{Colors.BLUE}[DEBUG]{Colors.ENDC} {message}")


def run_command(command: str, dry_run: bool = False, debug: bool = False,
                tolerate_failure: bool = False) -> Optional[str]:
    """Run a shell command and return its output.

    Args:
        command: The command to run
        dry_run: If True, don't actually execute commands that modify the system
        debug: If True, print additional debug information
        tolerate_failure: If True, a failing command is an expected outcome and
            is only reported in debug output

    Returns:
        Command output as string or None if command failed
    """
    if dry_run:
        log_debug(f"[DRY RUN] Would run command: {command}", debug)
        # Read-only queries still run so the simulated flow sees the real machine
        read_only_prefixes = ('lsmod', 'LC_ALL=C lscpu', 'pgrep ', 'getent ', 'id ', 'mokutil ')
        is_read_only = command.startswith(read_only_prefixes)

        if not is_read_only:
            # Simulate success for commands that would modify the system
            return "DRY-RUN-SUCCESS"

    try:
        result = subprocess.run(
            command,
            shell=True,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors='ignore'
        )
        log_debug(f"Command output: {result.stdout.strip()}", debug)
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.strip() if e.stderr else ""
        if tolerate_failure:
            log_debug(f"Command failed (ignored): {command} {stderr}".rstrip(), debug)
        else:
            log_error(f"Command failed: {command}")
            if stderr:
                log_error(f"Stderr: {stderr}")
        return None
    except FileNotFoundError:
        if tolerate_failure:
            log_debug(f"Command not found: {command.split()[0]}", debug)
        else:
            log_error(f"Command not found: {command.split()[0]}")
        return None
