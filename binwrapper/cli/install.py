"""
Install entry point.

Provisions the pinned binary without running it, for use as a
post-install step or to repair a broken cache.

Usage: plugincheck2-install [--force] [--config PATH] [-v | -q]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from binwrapper.cli.utils import (
    EXIT_INTERRUPTED,
    EXIT_SETUP_FAILURE,
    configure_logging,
)
from binwrapper.config.loader import load_config, log_level_from_env
from binwrapper.core.exceptions import BinWrapperError
from binwrapper.core.provisioner import BinaryProvisioner

logger = logging.getLogger(__name__)


class InstallCLI:
    """Command-line interface for provisioning without launching."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="plugincheck2-install",
            description="Download and unpack the pinned release binary",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Delete the cache directory and provision from scratch",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to release descriptor (default: bundled release.yaml)",
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run install with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)
        self._configure_logging(parsed_args)

        try:
            config = load_config(parsed_args.config)
            provisioner = BinaryProvisioner(config.descriptor, config.cache_dir)

            if parsed_args.force:
                provisioner.clear_cache()

            binary_path = provisioner.ensure_binary()
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return EXIT_INTERRUPTED
        except (BinWrapperError, OSError) as e:
            logger.error(f"Error: {e}")
            return EXIT_SETUP_FAILURE

        print(binary_path)
        return 0

    def _configure_logging(self, args):
        """Configure logging based on verbose/quiet flags and the environment."""
        if args.verbose:
            level = logging.DEBUG
        elif args.quiet:
            level = logging.ERROR
        else:
            level = log_level_from_env()

        configure_logging(level)


def main():
    """Main entry point for the install command."""
    cli = InstallCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
