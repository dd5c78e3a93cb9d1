"""
Progress reporting for long-running pipeline steps.

Steps are announced with report_step(), individual items with report(),
which prefixes an "(n/total)" counter aligned to the width of total.
"""

import logging

logger = logging.getLogger(__name__)


def format_counter(current: int, total: int) -> str:
    """
    Format a 1-based step counter.

    Args:
        current: Zero-based index of the current item
        total: Total number of items

    Returns:
        Counter such as "(3 /12)"

    Example:
        >>> format_counter(2, 12)
        '(3 /12)'
    """
    total_s = str(total)
    return f"({str(current + 1).ljust(len(total_s))}/{total_s})"


def report(current: int, total: int, message: str) -> None:
    """Log progress for one item of a step."""
    logger.info(f"{format_counter(current, total)}  {message}")


def report_step(message: str) -> None:
    """Log the start (or skip) of a pipeline step."""
    logger.info(f"=> {message}")
