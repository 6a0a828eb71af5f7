"""Final report for a KVM/VirtualBox switch run."""

from .config import Config
from .state import Outcome, RunState
from .system import HostSystem
from .utils import Colors, is_quiet, log_debug, log_info, log_success, log_warning


def display_changes_summary(state: RunState) -> None:
    """Print every tracked change (debug output only)."""
    if not state.debug:
        return
    if not state.changes:
        log_debug("No system changes were made.", state.debug)
        return

    log_debug("System changes made during this run:", state.debug)
    for change in state.changes:
        extra = f" ({change['user']})" if "user" in change else ""
        log_debug(f"  - [{change['category']}] {change['action']}: {change['target']}{extra}",
                  state.debug)


def summary(config: Config, host: HostSystem, state: RunState) -> Outcome:
    """Report completion and what to do next."""
    if not is_quiet():
        print()

    if config.dry_run:
        log_success("[DRY RUN] Operation simulated. No actual changes were made.")
    else:
        log_success(f"{Colors.BOLD}Operation completed.{Colors.ENDC}")

    display_changes_summary(state)

    if config.persist:
        log_warning("   You enabled the KVM blacklist. To re-enable KVM in the future run:")
        log_warning(f"     sudo {config.prog} --revert")
    log_info("   Now try starting VirtualBox and your VM.")
    return Outcome.OK
