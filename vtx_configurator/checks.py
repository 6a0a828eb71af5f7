"""System checks run before switching hypervisors."""

import os

from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_debug, log_error

INTEL_VENDOR_ID = "GenuineIntel"
AMD_VENDOR_ID = "AuthenticAMD"


def check_root() -> bool:
    """Check if the script is running with root privileges."""
    is_root = os.geteuid() == 0
    if not is_root:
        log_error("Please run as root (use sudo).")
    return is_root


def classify_cpu_vendor(vendor_id: str) -> str:
    """Map a CPU vendor string to 'intel', 'amd' or 'unknown'."""
    if vendor_id == INTEL_VENDOR_ID:
        return "intel"
    if vendor_id == AMD_VENDOR_ID:
        return "amd"
    return "unknown"


def detect_cpu_vendor(config, host: HostSystem, state: RunState) -> Outcome:
    """Record the CPU vendor.

    The result is informational: both vendor-specific KVM modules are
    unloaded regardless of what is detected here.
    """
    vendor_id = host.platform.vendor_string()
    state.cpu_vendor_str = vendor_id
    state.cpu_vendor = classify_cpu_vendor(vendor_id)
    log_debug(f"CPU vendor: {vendor_id or 'Unknown'} ({state.cpu_vendor})", config.debug)
    return Outcome.OK
