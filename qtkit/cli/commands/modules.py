"""
Modules command implementation.

Shows which Qt modules an unpacked tree contains and which of them the
configure stage would skip.
"""

import logging

from qtkit.cli.utils import config_from_args
from qtkit.pipeline.configure import ConfigureStage
from qtkit.qt.modules import ModuleDiscovery
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the modules command.

    Args:
        args: Parsed command-line arguments (qt_version)

    Returns:
        Exit code (0 for success, 2 if the tree is not unpacked)
    """
    config = config_from_args(args)
    version = QtVersion.parse(args.qt_version, config.cache_dir, config.mirror)

    if not version.path.is_dir():
        logger.error(f"Qt {version} is not unpacked in {version.path}")
        return 2

    found = ModuleDiscovery().inspect(version)
    if not found.found_manifest:
        print(f"No module manifest found in {version.path}")
        return 0

    keep = set(config.keep_modules)
    print(f"Qt {version} modules (from {found.source}):")
    for name in sorted(found.modules):
        marker = "keep" if name in keep else "skip"
        print(f"  qt{name:<24} {marker}")

    stage = ConfigureStage(config.cache_dir, keep_modules=keep)
    skipped = stage.skip_modules(version)
    print(f"{len(skipped)} module(s) skipped when configuring")
    return 0
