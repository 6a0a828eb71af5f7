"""Loading the VirtualBox kernel modules."""

from .config import Config
from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_error, log_info, log_success, log_warning

VBOX_PRIMARY_MODULE = "vboxdrv"
VBOX_DEPENDENT_MODULES = ["vboxnetflt", "vboxnetadp", "vboxpci"]


def report_vboxdrv_failure(host: HostSystem, state: RunState) -> None:
    """Explain why vboxdrv usually fails to load and how to fix it."""
    log_error(f"   Failed to load {VBOX_PRIMARY_MODULE}.")
    log_warning("   Possible causes: DKMS modules not built or Secure Boot blocking unsigned modules.")
    log_warning("   Suggestions:")
    log_warning("     • Reinstall modules: apt install --reinstall virtualbox-dkms virtualbox")
    log_warning("     • If Secure Boot is enabled: disable it or sign the DKMS modules.")

    state.secure_boot_status = host.platform.secure_boot_enabled()
    if state.secure_boot_status is True:
        log_warning("   Secure Boot is ENABLED on this machine (mokutil --sb-state).")
    elif state.secure_boot_status is False:
        log_info("   Secure Boot is disabled; rebuilding the DKMS modules is the likely fix.")


def load_virtualbox_modules(config: Config, host: HostSystem, state: RunState) -> Outcome:
    """Load vboxdrv and, if that works, its dependent modules."""
    if not config.load_vbox:
        log_info("Skipping VirtualBox module load (--no-vbox).")
        return Outcome.SKIPPED

    all_modules = ", ".join([VBOX_PRIMARY_MODULE] + VBOX_DEPENDENT_MODULES)
    log_info(f"Loading VirtualBox modules ({all_modules})...")
    if not host.modules.load(VBOX_PRIMARY_MODULE):
        report_vboxdrv_failure(host, state)
        return Outcome.DEGRADED

    state.track_change("modules", VBOX_PRIMARY_MODULE, "loaded")
    for module in VBOX_DEPENDENT_MODULES:
        # vboxpci is gone from VirtualBox 6.1+, so failures here are expected
        if host.modules.load(module):
            state.track_change("modules", module, "loaded")

    log_success("   VirtualBox modules loaded.")
    return Outcome.OK
