"""
Shared utilities for CLI commands.
"""

import logging

from qtkit.config.parser import QtKitConfig, load_config

logger = logging.getLogger(__name__)


def config_from_args(args) -> QtKitConfig:
    """
    Load the configuration and apply command-line overrides.

    Args:
        args: Parsed command-line arguments

    Returns:
        Configuration for the command

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    project_root = args.project_root.resolve()
    config = load_config(project_root, config_path=args.config)

    if args.cache_dir is not None:
        cache_dir = args.cache_dir
        if not cache_dir.is_absolute():
            cache_dir = project_root / cache_dir
        config.cache_dir = cache_dir

    if getattr(args, "system", False):
        config.system = True
    if getattr(args, "bindgen_tool", None):
        config.bindgen.tool = args.bindgen_tool
    if getattr(args, "manifest", None):
        config.bindgen.manifest = args.manifest

    logger.debug(f"Project root: {config.project_root}")
    logger.debug(f"Download cache: {config.cache_dir}")
    return config


def print_box(text: str, width: int = 70, char: str = "="):
    """Print text in a box for emphasis."""
    print(char * width)
    print(text)
    print(char * width)
