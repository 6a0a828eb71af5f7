"""Stopping services and processes that keep KVM busy."""

import signal
import time

from .config import Config
from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_debug, log_info, log_warning

# Services to stop if present
SERVICES = [
    "libvirtd", "virtqemud", "virtxend", "virtlxcd",
    "multipassd",
    "qemu-kvm", "qemud",
    "docker-desktop",
]

# Processes that may keep KVM busy without a managed unit
PROCESSES = [
    "qemu-system-x86_64", "qemu-kvm", "qemu-system-aarch64",
    "virtqemud", "virtlxcd", "multipass",
]

# Seconds between SIGTERM and SIGKILL
TERMINATE_GRACE_PERIOD = 1


def terminate_process(host: HostSystem, name: str, state: RunState) -> None:
    """Send SIGTERM to a process, then SIGKILL if it is still around."""
    log_warning(f"   Found process {name}, attempting to terminate...")
    host.processes.signal(name, signal.SIGTERM)
    state.track_change("processes", name, "terminated")
    time.sleep(TERMINATE_GRACE_PERIOD)
    if host.processes.is_running(name):
        log_debug(f"{name} ignored SIGTERM, sending SIGKILL", state.debug)
        host.processes.signal(name, signal.SIGKILL)
        state.track_change("processes", name, "killed")


def stop_services(config: Config, host: HostSystem, state: RunState) -> Outcome:
    """Stop the services and processes that may hold the KVM modules open."""
    if not config.stop_services:
        log_info("Skipping service stop (--no-stop).")
        return Outcome.SKIPPED

    log_info("Stopping services that may use KVM (missing units are ignored)...")
    for service in SERVICES:
        if host.services.stop(service):
            state.track_change("services", service, "stopped")

    for name in PROCESSES:
        if host.processes.is_running(name):
            terminate_process(host, name, state)

    return Outcome.OK
