"""Switch CPU virtualization from KVM to VirtualBox on a Linux host."""

# Export public modules and functions
from .cli import main, parse_args, run
from .config import Config
from .pipeline import build_steps, run_pipeline
from .state import Outcome, RunState
from .system import HostSystem
from .utils import Colors, log_info, log_success, log_warning, log_error, log_debug, run_command

__all__ = [
    # Main CLI functions
    'main', 'parse_args', 'run',
    # Pipeline
    'Config', 'HostSystem', 'Outcome', 'RunState', 'build_steps', 'run_pipeline',
    # Utility functions
    'Colors', 'log_info', 'log_success', 'log_warning', 'log_error', 'log_debug', 'run_command'
]
