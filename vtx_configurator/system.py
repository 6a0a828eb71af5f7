"""Host facilities used by the switching steps.

Every interaction with the machine (service control, process signalling,
kernel modules, user groups, CPU and firmware queries) goes through one of
the small classes below. ``HostSystem`` bundles them so the steps can be
run against the real machine or against test doubles.
"""

import shlex
import shutil
from pathlib import Path
from typing import List, Optional

from .blacklist import BlacklistFile
from .utils import log_debug, run_command


class LoadedModule:
    """One row of ``lsmod`` output."""

    def __init__(self, name: str, size: int = 0, use_count: int = 0,
                 dependents: Optional[List[str]] = None):
        self.name = name
        self.size = size
        self.use_count = use_count
        self.dependents = dependents or []

    def __repr__(self) -> str:
        return f"LoadedModule({self.name!r}, use_count={self.use_count}, dependents={self.dependents})"


def parse_lsmod(output: str) -> List[LoadedModule]:
    """Parse ``lsmod`` output into LoadedModule entries, skipping the header."""
    modules = []
    for line in output.strip().split('\n'):
        parts = line.split()
        if len(parts) < 3 or parts[0] == "Module":
            continue
        try:
            size = int(parts[1])
            use_count = int(parts[2])
        except ValueError:
            # "-" or other markers for permanent/unloading modules
            size, use_count = 0, 0
        dependents = []
        if len(parts) > 3:
            dependents = [d for d in parts[3].split(',') if d and not d.startswith('[')]
        modules.append(LoadedModule(parts[0], size, use_count, dependents))
    return modules


class ServiceManager:
    """Stops systemd units."""

    def __init__(self, dry_run: bool = False, debug: bool = False):
        self.dry_run = dry_run
        self.debug = debug

    def stop(self, name: str) -> bool:
        # "Unit not found" and "not loaded" are expected on most machines
        result = run_command(f"systemctl stop {shlex.quote(name)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return result is not None


class ProcessManager:
    """Finds and signals processes by exact executable name."""

    def __init__(self, dry_run: bool = False, debug: bool = False):
        self.dry_run = dry_run
        self.debug = debug

    def is_running(self, name: str) -> bool:
        # pgrep exits 1 when nothing matches
        result = run_command(f"pgrep -x {shlex.quote(name)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return result is not None

    def signal(self, name: str, signum: int) -> bool:
        result = run_command(f"pkill -{int(signum)} -x {shlex.quote(name)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return result is not None


class ModuleManager:
    """Loads, unloads and lists kernel modules."""

    def __init__(self, dry_run: bool = False, debug: bool = False):
        self.dry_run = dry_run
        self.debug = debug

    def load(self, name: str) -> bool:
        result = run_command(f"modprobe {shlex.quote(name)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return result is not None

    def unload(self, name: str) -> bool:
        result = run_command(f"modprobe -r {shlex.quote(name)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return result is not None

    def loaded_modules(self) -> Optional[List[LoadedModule]]:
        """Return the currently loaded modules, or None if lsmod failed."""
        output = run_command("lsmod", dry_run=self.dry_run, debug=self.debug)
        if output is None:
            return None
        return parse_lsmod(output)


class GroupManager:
    """Queries and extends user group membership."""

    def __init__(self, dry_run: bool = False, debug: bool = False):
        self.dry_run = dry_run
        self.debug = debug

    def group_exists(self, group: str) -> bool:
        result = run_command(f"getent group {shlex.quote(group)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        return bool(result)

    def user_groups(self, user: str) -> Optional[List[str]]:
        output = run_command(f"id -nG {shlex.quote(user)}", dry_run=self.dry_run,
                             debug=self.debug, tolerate_failure=True)
        if output is None:
            return None
        return output.split()

    def add_user(self, user: str, group: str) -> bool:
        result = run_command(f"usermod -aG {shlex.quote(group)} {shlex.quote(user)}",
                             dry_run=self.dry_run, debug=self.debug)
        return result is not None


class PlatformInfo:
    """CPU and firmware identification."""

    def __init__(self, dry_run: bool = False, debug: bool = False):
        self.dry_run = dry_run
        self.debug = debug

    def vendor_string(self) -> str:
        """Return the CPU vendor string (e.g. GenuineIntel), or an empty string."""
        output = run_command("LC_ALL=C lscpu", dry_run=self.dry_run, debug=self.debug,
                             tolerate_failure=True)
        if output:
            for line in output.split('\n'):
                key, sep, value = line.partition(':')
                if sep and key.strip() == "Vendor ID":
                    return value.strip()

        # lscpu missing or without a vendor line (some containers/VMs)
        cpuinfo = Path("/proc/cpuinfo")
        try:
            with open(cpuinfo, 'r') as f:
                for line in f:
                    key, sep, value = line.partition(':')
                    if sep and key.strip() == "vendor_id":
                        return value.strip()
        except OSError as e:
            log_debug(f"Could not read {cpuinfo}: {e}", self.debug)
        return ""

    def secure_boot_enabled(self) -> Optional[bool]:
        """Return True/False for the Secure Boot state, or None if unknown."""
        if not shutil.which("mokutil"):
            log_debug("mokutil not available, Secure Boot state unknown.", self.debug)
            return None
        result = run_command("mokutil --sb-state", dry_run=self.dry_run, debug=self.debug,
                             tolerate_failure=True)
        if not result:
            return None
        result_lower = result.lower()
        if "secureboot enabled" in result_lower:
            return True
        if "secureboot disabled" in result_lower:
            return False
        return None


class HostSystem:
    """All host facilities used during one run."""

    def __init__(self, dry_run: bool = False, debug: bool = False,
                 services: Optional[ServiceManager] = None,
                 processes: Optional[ProcessManager] = None,
                 modules: Optional[ModuleManager] = None,
                 groups: Optional[GroupManager] = None,
                 platform: Optional[PlatformInfo] = None,
                 blacklist: Optional[BlacklistFile] = None):
        self.services = services or ServiceManager(dry_run, debug)
        self.processes = processes or ProcessManager(dry_run, debug)
        self.modules = modules or ModuleManager(dry_run, debug)
        self.groups = groups or GroupManager(dry_run, debug)
        self.platform = platform or PlatformInfo(dry_run, debug)
        self.blacklist = blacklist or BlacklistFile(dry_run=dry_run, debug=debug)
