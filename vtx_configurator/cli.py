#!/usr/bin/env python3
"""Command line interface for switching VT-x/AMD-V from KVM to VirtualBox."""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional, Union

from .checks import check_root
from .config import Config
from .lock import LOCK_PATH, InstanceLockedError, instance_lock
from .pipeline import build_steps, run_pipeline
from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_debug, log_error, log_warning, set_quiet

DESCRIPTION = """\
Unblocks VirtualBox from the error "VT-x is being used by another hypervisor
(VERR_VMX_IN_VMX_ROOT_MODE)" by stopping KVM users, unloading the KVM modules
and loading the VirtualBox modules."""


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=DESCRIPTION,
        epilog="Example: sudo vbox-vtx-fix --persist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        add_help=False,
    )
    parser.add_argument('-h', '--help', action='store_true',
                        help='Show this help message and exit.')
    parser.add_argument('--persist', action='store_true',
                        help='Blacklist kvm/kvm_intel or kvm_amd to prevent loading at boot.')
    parser.add_argument('--revert', action='store_true',
                        help='Remove the previously created blacklist.')
    parser.add_argument('--no-vbox', action='store_true',
                        help='Do not attempt to load VirtualBox modules.')
    parser.add_argument('--no-stop', action='store_true',
                        help='Do not stop services using KVM (libvirtd, qemu, multipass, etc.).')
    parser.add_argument('--quiet', action='store_true',
                        help='Reduce output.')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show what would be done without changing the system. Implies --debug.')
    parser.add_argument('--debug', action='store_true',
                        help='Enable verbose debug output.')
    return parser


def get_prog_name(argv0: str) -> str:
    """Return the command a user would type to run this tool again."""
    if os.path.basename(argv0) == "__main__.py":
        return "python3 -m vtx_configurator"
    return argv0 or "vbox-vtx-fix"


def parse_args(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments.

    Tokens are checked left to right: the first unknown token exits with
    status 2 and the first -h/--help exits with status 0, whichever comes
    first.
    """
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser(prog=get_prog_name(sys.argv[0]))
    known = {opt for action in parser._actions for opt in action.option_strings}

    for token in argv:
        if token not in known:
            parser.error(f"Unknown argument: {token}")
        if token in ('-h', '--help'):
            parser.print_help()
            parser.exit(0)

    args = parser.parse_args(argv)
    return Config.from_args(args, prog=parser.prog)


def run(config: Config, host: HostSystem) -> int:
    """Run every step for the configuration and return the exit status."""
    state = RunState(debug=config.debug, dry_run=config.dry_run)
    outcome = run_pipeline(build_steps(config), config, host, state)
    log_debug(f"Run finished with outcome: {outcome.value}", config.debug)
    if outcome is Outcome.FATAL:
        return 1
    # Degraded runs (KVM still loaded, vboxdrv missing) keep status 0
    return 0


def main(argv: Optional[List[str]] = None, host: Optional[HostSystem] = None,
         lock_path: Union[str, Path] = LOCK_PATH) -> int:
    """Main entry point for the application."""
    config = parse_args(argv)
    set_quiet(config.quiet)
    log_debug(f"Configuration: {config}", config.debug)

    if not check_root():
        return 1

    if config.dry_run:
        log_warning("Dry run mode active: No changes will be made to the system.")

    if host is None:
        host = HostSystem(dry_run=config.dry_run, debug=config.debug)

    try:
        with instance_lock(lock_path, debug=config.debug):
            return run(config, host)
    except InstanceLockedError as e:
        log_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
