"""
Generate command implementation.

Prepares every Qt version the configured platforms need, then runs the
binding generator once per platform.
"""

import logging

from qtkit.cli.utils import config_from_args
from qtkit.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the generate command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)

    Raises:
        QtKitError: If any step fails
    """
    logger.debug(f"Arguments: {args}")
    config = config_from_args(args)

    platforms = Orchestrator(config).run()

    logger.info(f"Generated bindings for {len(platforms)} platform(s)")
    return 0
