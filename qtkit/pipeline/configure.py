"""
Configure stage: turn an unpacked Qt tree into the minimal form the binding
generator reads.

Only qtbase is kept; every other module found in the tree is skipped. After
./configure, `make qmake_all` generates the forwarding headers under
qtbase/include without building the libraries.
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

from qtkit.core.exceptions import BuildHeaderFailure, ConfigureFailure
from qtkit.core.process import ToolRunner
from qtkit.pipeline.base import Stage, is_configured
from qtkit.qt.modules import ModuleDiscovery
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)

DEFAULT_KEEP_MODULES: FrozenSet[str] = frozenset({"base"})


def build_configure_command(version: QtVersion, skip_modules: Iterable[str]) -> List[str]:
    """
    Build the ./configure command line for a tree.

    Args:
        version: Qt version being configured (its tree is the working directory)
        skip_modules: Modules to exclude

    Returns:
        Command line
    """
    command = [
        "./configure",
        "-opensource", "-confirm-license",
        "-nomake", "examples",
        "-nomake", "tests",
        "-nomake", "tools",
        "-prefix", str(version.path / "qtbase"),
    ]
    for module in skip_modules:
        command += ["-skip", module]
    return command


def build_headers_command(version: QtVersion, make: str = "make") -> List[str]:
    """make invocation that generates the qmake files and headers of every module."""
    return [make, "-C", str(version.path), "qmake_all"]


class ConfigureStage(Stage):
    """Configures every version whose tree has no executable qmake yet."""

    title = "Configuring Qt versions"
    done_message = "All Qt sources already configured"

    def __init__(
        self,
        cache_dir: Path,
        runner: Optional[ToolRunner] = None,
        discovery: Optional[ModuleDiscovery] = None,
        keep_modules: Iterable[str] = DEFAULT_KEEP_MODULES,
        make: str = "make",
    ):
        super().__init__(cache_dir, runner)
        self.discovery = discovery or ModuleDiscovery()
        self.keep_modules = frozenset(keep_modules)
        self.make = make

    def is_done(self, version: QtVersion) -> bool:
        return is_configured(version)

    def describe(self, version: QtVersion) -> str:
        return f"Configuring Qt {version.semver}"

    def skip_modules(self, version: QtVersion) -> List[str]:
        """
        Modules of the tree that configure should skip, sorted by name.

        A tree without any module manifest is configured in full.
        """
        found = self.discovery.inspect(version)
        if not found.found_manifest:
            logger.warning(
                f"No module manifest (.gitmodules or qt.pro) in {version.path}; "
                "configuring Qt without skipping any module"
            )
            return []
        return sorted(found.modules - self.keep_modules)

    def process(self, version: QtVersion) -> None:
        """
        Raises:
            ConfigureFailure: If ./configure fails
            BuildHeaderFailure: If make qmake_all fails
        """
        skipped = self.skip_modules(version)
        if skipped:
            logger.debug(f"Skipping Qt modules: {', '.join(skipped)}")

        result = self.runner.run(
            build_configure_command(version, skipped), cwd=version.path
        )
        if not result.success:
            raise ConfigureFailure(version.name, version.path, result.exit_code)

        result = self.runner.run(build_headers_command(version, self.make))
        if not result.success:
            raise BuildHeaderFailure(version.name, version.path, result.exit_code)
