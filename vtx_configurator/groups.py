"""vboxusers group membership for the invoking user."""

import os
import pwd
from typing import Optional

from .config import Config
from .state import Outcome, RunState
from .system import HostSystem
from .utils import log_debug, log_error, log_info, log_warning

VBOX_GROUP = "vboxusers"


def get_invoking_user() -> Optional[str]:
    """Return the user who ran sudo, falling back to the current user."""
    for var in ("SUDO_USER", "USER"):
        user = os.environ.get(var)
        if user:
            return user
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return None


def ensure_vboxusers(config: Config, host: HostSystem, state: RunState) -> Outcome:
    """Make sure the invoking user is a member of the vboxusers group."""
    if not host.groups.group_exists(VBOX_GROUP):
        log_warning(f"The {VBOX_GROUP} group does not exist. VirtualBox may not be installed.")
        return Outcome.TOLERATED

    user = get_invoking_user()
    state.invoking_user = user
    if not user:
        log_warning(f"Could not determine the invoking user; not changing {VBOX_GROUP} membership.")
        return Outcome.TOLERATED

    groups = host.groups.user_groups(user)
    log_debug(f"Groups of {user}: {groups}", config.debug)
    if groups is not None and VBOX_GROUP in groups:
        log_info(f"User {user} is already in the {VBOX_GROUP} group.")
        return Outcome.OK

    log_info(f"Adding {user} to the {VBOX_GROUP} group...")
    if not host.groups.add_user(user, VBOX_GROUP):
        log_error(f"   Could not add {user} to the {VBOX_GROUP} group.")
        return Outcome.DEGRADED

    state.track_change("groups", VBOX_GROUP, "member_added", user=user)
    log_warning(f"   Log out/in for the {VBOX_GROUP} membership to apply.")
    return Outcome.OK
