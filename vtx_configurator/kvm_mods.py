"""Unloading the KVM kernel modules."""

from typing import List

from .config import Config
from .state import Outcome, RunState
from .system import HostSystem, LoadedModule
from .utils import log_info, log_success, log_warning

# Vendor modules first; kvm itself can only go once both are gone
KVM_MODULES = ["kvm_amd", "kvm_intel", "kvm"]


def remaining_kvm_modules(modules: List[LoadedModule]) -> List[LoadedModule]:
    return [m for m in modules if m.name.startswith("kvm")]


def describe_module(module: LoadedModule) -> str:
    description = f"{module.name} ({module.use_count} deps)"
    if module.dependents:
        description += f" used by {', '.join(module.dependents)}"
    return description


def unload_kvm(config: Config, host: HostSystem, state: RunState) -> Outcome:
    """Unload the KVM modules and report any that are still loaded."""
    log_info("Unloading KVM modules...")
    # Both vendor modules are tried; the one that is not loaded fails harmlessly
    for module in KVM_MODULES:
        if host.modules.unload(module):
            state.track_change("modules", module, "unloaded")

    loaded = host.modules.loaded_modules()
    if loaded is None:
        log_warning("   Could not list loaded modules to verify that KVM was unloaded.")
        return Outcome.DEGRADED

    remaining = remaining_kvm_modules(loaded)
    if remaining:
        log_warning("   Warning: KVM modules are still loaded. A process may be holding them.")
        for module in remaining:
            log_warning(f"   • {describe_module(module)}")
        return Outcome.DEGRADED

    log_success("   KVM successfully unloaded.")
    return Outcome.OK
