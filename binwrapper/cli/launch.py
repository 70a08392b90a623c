"""
Launcher entry point.

Provisions the pinned binary on first use and runs it with the wrapper's
arguments. The wrapper defines no flags of its own; see
binwrapper.config.loader for the environment variables it reads.

Usage: plugincheck2 [ARGS...]
"""

import logging
import sys
from typing import List, Optional

from binwrapper.cli.utils import (
    EXIT_INTERRUPTED,
    EXIT_SETUP_FAILURE,
    configure_logging,
)
from binwrapper.config.loader import load_config, log_level_from_env
from binwrapper.core.exceptions import BinWrapperError
from binwrapper.core.launcher import run
from binwrapper.core.provisioner import BinaryProvisioner

logger = logging.getLogger(__name__)


def run_wrapper(args: List[str]) -> int:
    """
    Provision the binary and run it.

    Args:
        args: Arguments forwarded verbatim to the binary

    Returns:
        The binary's exit code, or EXIT_SETUP_FAILURE if it never started
    """
    try:
        config = load_config()
        provisioner = BinaryProvisioner(config.descriptor, config.cache_dir)
        binary_path = provisioner.ensure_binary()
        return run(binary_path, args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return EXIT_INTERRUPTED
    except (BinWrapperError, OSError) as e:
        logger.error(f"Error: {e}")
        return EXIT_SETUP_FAILURE


def main(argv: Optional[List[str]] = None):
    """Main entry point for the launcher."""
    configure_logging(log_level_from_env())
    args = sys.argv[1:] if argv is None else argv
    sys.exit(run_wrapper(list(args)))


if __name__ == "__main__":
    main()
