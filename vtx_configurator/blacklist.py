"""KVM boot-time blacklist handling via /etc/modprobe.d."""

from pathlib import Path
from typing import Union

from .state import Outcome, RunState
from .utils import log_debug, log_error, log_info, log_success, log_warning

BLACKLIST_PATH = Path('/etc/modprobe.d/blacklist-kvm.conf')

# Every module the unloader removes, in blacklist order
BLACKLISTED_MODULES = ["kvm", "kvm_intel", "kvm_amd"]

BLACKLIST_CONTENT = (
    "# Created by vbox-vtx-fix - prevents KVM from loading at boot\n"
    + "".join(f"blacklist {module}\n" for module in BLACKLISTED_MODULES)
)


class BlacklistFile:
    """The modprobe.d file that stops KVM from loading at boot."""

    def __init__(self, path: Union[str, Path] = BLACKLIST_PATH, dry_run: bool = False,
                 debug: bool = False):
        self.path = Path(path)
        self.dry_run = dry_run
        self.debug = debug

    def exists(self) -> bool:
        return self.path.is_file()

    def write(self) -> None:
        """Write the blacklist, replacing any existing file.

        Raises:
            OSError: If the directory or file cannot be written
        """
        if self.dry_run:
            log_debug(f"[DRY RUN] Would write {self.path}:", self.debug)
            for line in BLACKLIST_CONTENT.splitlines():
                log_debug(f"  {line}", self.debug)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(BLACKLIST_CONTENT)

    def remove(self) -> None:
        """Delete the blacklist.

        Raises:
            OSError: If the file cannot be removed
        """
        if self.dry_run:
            log_debug(f"[DRY RUN] Would remove {self.path}", self.debug)
            return
        self.path.unlink()


def revert_blacklist(config, host, state: RunState) -> Outcome:
    """Remove a previously written KVM blacklist."""
    blacklist = host.blacklist
    if not blacklist.exists():
        log_warning(f"No KVM blacklist found to remove ({blacklist.path} does not exist).")
        return Outcome.TOLERATED

    log_info(f"Removing {blacklist.path} ...")
    try:
        blacklist.remove()
    except OSError as e:
        log_error(f"Failed to remove {blacklist.path}: {e}")
        return Outcome.DEGRADED

    state.track_change("files", str(blacklist.path), "removed")
    log_success("Done. Reboot to allow KVM to load again at boot.")
    return Outcome.OK


def persist_blacklist(config, host, state: RunState) -> Outcome:
    """Write the KVM blacklist so KVM stays unloaded after a reboot."""
    blacklist = host.blacklist
    log_info(f"Configuring KVM blacklist in {blacklist.path} ...")
    existed = blacklist.exists()
    try:
        blacklist.write()
    except OSError as e:
        log_error(f"Failed to write KVM blacklist to {blacklist.path}: {e}")
        log_error("KVM will load again at the next boot.")
        return Outcome.FATAL

    state.track_change("files", str(blacklist.path), "modified" if existed else "created")
    log_success("Blacklist written. Reboot to make it effective.")
    return Outcome.OK
