"""Ordered execution of the switching steps."""

from typing import Callable, List, Tuple

from .blacklist import persist_blacklist, revert_blacklist
from .checks import detect_cpu_vendor
from .config import Config
from .groups import ensure_vboxusers
from .kvm_mods import unload_kvm
from .reporting import summary
from .services import stop_services
from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_debug
from .vbox_mods import load_virtualbox_modules


Step = Callable[[Config, HostSystem, RunState], Outcome]


def build_steps(config: Config) -> List[Tuple[str, Step]]:
    """Return the steps for this configuration in execution order."""
    steps: List[Tuple[str, Step]] = []
    if config.revert:
        steps.append(("revert_blacklist", revert_blacklist))
    steps.extend([
        ("detect_cpu_vendor", detect_cpu_vendor),
        ("stop_services", stop_services),
        ("unload_kvm", unload_kvm),
        ("load_virtualbox_modules", load_virtualbox_modules),
        ("ensure_vboxusers", ensure_vboxusers),
    ])
    if config.persist:
        steps.append(("persist_blacklist", persist_blacklist))
    steps.append(("summary", summary))
    return steps


def run_pipeline(steps: List[Tuple[str, Step]], config: Config, host: HostSystem,
                 state: RunState) -> Outcome:
    """Run steps in order until one is fatal.

    Returns:
        Outcome.FATAL if a step aborted the run, otherwise the worst
        non-fatal outcome seen (OK, TOLERATED or DEGRADED).
    """
    worst = Outcome.OK
    for name, step in steps:
        log_debug(f"Running step: {name}", config.debug)
        outcome = step(config, host, state)
        state.outcomes[name] = outcome
        log_debug(f"Step {name} finished: {outcome.value}", config.debug)

        if outcome is Outcome.FATAL:
            return Outcome.FATAL
        if outcome is Outcome.DEGRADED:
            worst = Outcome.DEGRADED
        elif outcome is Outcome.TOLERATED and worst is Outcome.OK:
            worst = Outcome.TOLERATED
    return worst
