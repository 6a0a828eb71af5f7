"""State tracking for a KVM/VirtualBox switch run."""

import datetime
import enum
from typing import Any, Dict, List, Optional

from .utils import log_debug


class Outcome(enum.Enum):
    """Result of a single step."""

    OK = "ok"
    SKIPPED = "skipped"
    # Something failed but the failure is expected and harmless
    TOLERATED = "tolerated"
    # The run continues but the operator has to act on a reported problem
    DEGRADED = "degraded"
    # The run stops here
    FATAL = "fatal"


class RunState:
    """Class for tracking what was detected and changed during one run."""

    def __init__(self, debug: bool = False, dry_run: bool = False):
        """Initialize the state container.

        Args:
            debug: Whether debug mode is enabled
            dry_run: Whether dry run mode is enabled
        """
        self.debug = debug
        self.dry_run = dry_run

        # System information
        self.cpu_vendor_str: str = ""
        self.cpu_vendor: str = "unknown"
        self.secure_boot_status: Optional[bool] = None
        self.invoking_user: Optional[str] = None

        # Step name -> outcome, in execution order
        self.outcomes: Dict[str, Any] = {}

        # Configuration changes tracking, in execution order
        self.changes: List[Dict[str, Any]] = []

    def track_change(self, category: str, target: str, action: str, **details: Any) -> None:
        """Track a change made to the system.

        Args:
            category: Category of the change (e.g., 'services', 'modules', 'files')
            target: Target of the change (e.g., unit name, module name, file path)
            action: Action taken (e.g., 'stopped', 'unloaded', 'created')
            details: Any additional details to record about the change
        """
        timestamp = datetime.datetime.now().isoformat()
        change_entry = {
            "category": category,
            "target": target,
            "action": action,
            "timestamp": timestamp,
        }
        change_entry.update(details)
        self.changes.append(change_entry)

        log_debug(f"Tracked change: {category} {action} {target} at {timestamp}", self.debug)

    def changes_for(self, category: str) -> List[Dict[str, Any]]:
        return [c for c in self.changes if c["category"] == category]
