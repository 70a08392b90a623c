"""
binwrapper command-line entry points.

- main: provision on first use, then run the binary with the caller's arguments
- install: provision only
"""

from .launch import main, run_wrapper
from .install import InstallCLI
from . import utils

__all__ = ["main", "run_wrapper", "InstallCLI", "utils"]
