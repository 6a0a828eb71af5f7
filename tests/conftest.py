"""
Shared test fixtures: a simulated machine behind fake host facilities.
"""

import signal
from pathlib import Path

import pytest

from vtx_configurator.blacklist import BlacklistFile
from vtx_configurator.system import HostSystem, LoadedModule
from vtx_configurator.utils import set_quiet

MUTATING_OPS = {"stop", "signal", "unload", "load", "add_user"}


class FakeMachine:
    """Kernel modules, processes and groups of a pretend host."""

    def __init__(self):
        # module name -> modules that depend on it
        self.loaded = {"kvm": ["kvm_intel"], "kvm_intel": []}
        self.available = {"vboxdrv", "vboxnetflt", "vboxnetadp", "vboxpci"}
        # modules that refuse to unload (held by something we did not stop)
        self.busy = set()
        self.lsmod_fails = False

        self.services = {"libvirtd"}
        self.running = set()
        # processes that ignore SIGTERM
        self.stubborn = set()

        self.groups = {"vboxusers": set()}
        self.vendor = "GenuineIntel"
        self.secure_boot = None

        self.calls = []

    def record(self, facility, op, *args):
        self.calls.append((facility, op) + args)

    def ops(self, op):
        return [c for c in self.calls if c[1] == op]

    def mutating_calls(self):
        return [c for c in self.calls if c[1] in MUTATING_OPS]


class FakeServiceManager:
    def __init__(self, machine):
        self.machine = machine

    def stop(self, name):
        self.machine.record("services", "stop", name)
        if name not in self.machine.services:
            return False
        self.machine.services.discard(name)
        return True


class FakeProcessManager:
    def __init__(self, machine):
        self.machine = machine

    def is_running(self, name):
        self.machine.record("processes", "is_running", name)
        return name in self.machine.running

    def signal(self, name, signum):
        self.machine.record("processes", "signal", name, int(signum))
        if name not in self.machine.running:
            return False
        if signum == signal.SIGKILL or name not in self.machine.stubborn:
            self.machine.running.discard(name)
        return True


class FakeModuleManager:
    def __init__(self, machine):
        self.machine = machine

    def load(self, name):
        self.machine.record("modules", "load", name)
        if name not in self.machine.available:
            return False
        self.machine.loaded.setdefault(name, [])
        return True

    def unload(self, name):
        self.machine.record("modules", "unload", name)
        loaded = self.machine.loaded
        if name not in loaded or name in self.machine.busy:
            return False
        if any(dep in loaded for dep in loaded[name]):
            return False
        del loaded[name]
        for dependents in loaded.values():
            if name in dependents:
                dependents.remove(name)
        return True

    def loaded_modules(self):
        self.machine.record("modules", "list")
        if self.machine.lsmod_fails:
            return None
        return [
            LoadedModule(name, 4096, len(deps), list(deps))
            for name, deps in self.machine.loaded.items()
        ]


class FakeGroupManager:
    def __init__(self, machine):
        self.machine = machine

    def group_exists(self, group):
        self.machine.record("groups", "group_exists", group)
        return group in self.machine.groups

    def user_groups(self, user):
        self.machine.record("groups", "user_groups", user)
        return [user] + sorted(g for g, members in self.machine.groups.items() if user in members)

    def add_user(self, user, group):
        self.machine.record("groups", "add_user", user, group)
        if group not in self.machine.groups:
            return False
        self.machine.groups[group].add(user)
        return True


class FakePlatformInfo:
    def __init__(self, machine):
        self.machine = machine

    def vendor_string(self):
        self.machine.record("platform", "vendor_string")
        return self.machine.vendor

    def secure_boot_enabled(self):
        self.machine.record("platform", "secure_boot_enabled")
        return self.machine.secure_boot


@pytest.fixture
def machine() -> FakeMachine:
    return FakeMachine()


@pytest.fixture
def blacklist_path(tmp_path: Path) -> Path:
    return tmp_path / "modprobe.d" / "blacklist-kvm.conf"


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    return tmp_path / "vbox-vtx-fix.lock"


@pytest.fixture
def host(machine, blacklist_path) -> HostSystem:
    return HostSystem(
        services=FakeServiceManager(machine),
        processes=FakeProcessManager(machine),
        modules=FakeModuleManager(machine),
        groups=FakeGroupManager(machine),
        platform=FakePlatformInfo(machine),
        blacklist=BlacklistFile(blacklist_path),
    )


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr("os.geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr("os.geteuid", lambda: 1000)


@pytest.fixture(autouse=True)
def invoking_user(monkeypatch):
    monkeypatch.setenv("SUDO_USER", "alice")
    return "alice"


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Record sleeps instead of waiting."""
    calls = []
    monkeypatch.setattr("vtx_configurator.services.time.sleep", calls.append)
    return calls


@pytest.fixture(autouse=True)
def reset_quiet():
    yield
    set_quiet(False)
