"""
Prepare command implementation.

Downloads, unpacks and configures Qt without running the generator.
"""

import logging

from qtkit.cli.utils import config_from_args
from qtkit.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the prepare command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")
    config = config_from_args(args)

    Orchestrator(config).run_prepare()
    return 0
