#!/usr/bin/env python3
"""
VirtualBox VT-x unblocker - runner script

This is a simplified wrapper script that calls the main functionality from the vtx_configurator package
without installing it.
"""

import os
import sys

# Add the current directory to the Python path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, script_dir)

if __name__ == "__main__":
    try:
        from vtx_configurator.cli import main
    except ImportError as e:
        print(f"ERROR: Could not import vtx_configurator package.")
        print(f"Import error: {e}")
        print(f"Make sure the vtx_configurator directory exists in the same directory as this script.")
        sys.exit(1)
    sys.exit(main())
