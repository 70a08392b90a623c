"""
Shared utilities for the binwrapper entry points.
"""

import logging

# Used only for failures that happen before the wrapped binary runs
EXIT_SETUP_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for an entry point.

    Messages go to stderr so the wrapped binary owns stdout.

    Args:
        level: Logging level
    """
    if level <= logging.DEBUG:
        format_str = "%(levelname)s [%(name)s] %(message)s"
    elif level >= logging.ERROR:
        format_str = "%(levelname)s: %(message)s"
    else:
        format_str = "%(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        force=True,  # Reconfigure if already configured
    )
