"""
Platforms command implementation.

Lists the target platforms with the variables and environment the
binding generator would be given.
"""

import logging

from qtkit.cli.utils import config_from_args, print_box
from qtkit.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the platforms command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = config_from_args(args)
    orchestrator = Orchestrator(config)
    generator = orchestrator.generator()

    for platform in orchestrator.build_platforms():
        print_box(platform.target)
        print(f"Qt source: {platform.qt.download_url}")
        print(f"Arguments: {' '.join(generator.arguments(platform))}")
        for key, value in platform.environment().items():
            print(f"  {key}={value}")
        print()
    return 0
