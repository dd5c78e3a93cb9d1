"""
Qt sub-module discovery.

A Qt source release is a super-repository of modules (qtbase, qtdeclarative,
qtwebengine, ...). To configure only what the bindings need, QtKit lists the
modules present in a tree and passes the unwanted ones to configure as
-skip flags.

Two manifest formats are understood, tried in order:

- .gitmodules (Qt 5.6 and later): one [submodule "qt<name>"] section per
  module; sections with `qt = false` are not part of the build.
- qt.pro (Qt 5.5 and earlier): one addModule(qt<name>, ...) call per module.

Whatever the manifest says, a module is only reported if its qt<name>
directory exists in the tree.
"""

import configparser
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Sequence, Set

from qtkit.core.exceptions import ManifestParseError
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)

SUBMODULE_SECTION = re.compile(r'submodule "qt(.*)"')
ADD_MODULE_LINE = re.compile(r"^addModule\(qt")
ADD_MODULE_NAME = re.compile(r"addModule\(qt([^,)]+)")


class ModuleStrategy(ABC):
    """A way of reading the module list out of a Qt source tree."""

    name: str = ""

    @abstractmethod
    def manifest_path(self, source_dir: Path) -> Path:
        """Path of the manifest file this strategy reads."""
        pass

    @abstractmethod
    def parse(self, manifest: Path) -> Set[str]:
        """
        Extract module names from an existing manifest.

        Raises:
            ManifestParseError: If the manifest is malformed
        """
        pass

    def discover(self, source_dir: Path) -> Optional[Set[str]]:
        """
        Read module names from the tree.

        Returns:
            Set of module names, or None if the manifest does not exist
        """
        manifest = self.manifest_path(source_dir)
        if not manifest.is_file():
            return None
        logger.debug(f"Reading Qt modules from {manifest}")
        return self.parse(manifest)


class GitModulesStrategy(ModuleStrategy):
    """Module list from the super-repository's .gitmodules."""

    name = ".gitmodules"

    def manifest_path(self, source_dir: Path) -> Path:
        return source_dir / ".gitmodules"

    def parse(self, manifest: Path) -> Set[str]:
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        try:
            parser.read(manifest, encoding="utf-8")
        except (configparser.Error, UnicodeDecodeError) as e:
            raise ManifestParseError(manifest, str(e).splitlines()[0]) from e

        modules = set()
        for section in parser.sections():
            if parser[section].get("qt") == "false":
                continue
            match = SUBMODULE_SECTION.search(section)
            if match and match.group(1):
                modules.add(match.group(1))
        return modules


class QtProjectStrategy(ModuleStrategy):
    """Module list from the addModule() calls in qt.pro (Qt 5.5 and earlier)."""

    name = "qt.pro"

    def manifest_path(self, source_dir: Path) -> Path:
        return source_dir / "qt.pro"

    def parse(self, manifest: Path) -> Set[str]:
        modules = set()
        with open(manifest, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if not ADD_MODULE_LINE.match(line):
                    continue
                match = ADD_MODULE_NAME.search(line)
                if match:
                    modules.add(match.group(1))
        return modules


DEFAULT_STRATEGIES: Sequence[ModuleStrategy] = (
    GitModulesStrategy(),
    QtProjectStrategy(),
)


@dataclass(frozen=True)
class DiscoveryResult:
    """
    Modules found in a source tree.

    Attributes:
        modules: Module names whose directories exist in the tree
        source: Name of the manifest that was read, or None if the tree has
            no manifest at all
    """

    modules: FrozenSet[str]
    source: Optional[str]

    @property
    def found_manifest(self) -> bool:
        return self.source is not None


class ModuleDiscovery:
    """Finds the optional Qt modules contained in unpacked source trees."""

    def __init__(self, strategies: Iterable[ModuleStrategy] = DEFAULT_STRATEGIES):
        self.strategies = list(strategies)

    def inspect(self, version: QtVersion) -> DiscoveryResult:
        """
        Discover modules, recording which manifest they came from.

        Args:
            version: Qt version whose unpacked tree is inspected

        Returns:
            DiscoveryResult; source is None when no manifest was found

        Raises:
            ManifestParseError: If the manifest is malformed
        """
        source_dir = version.path
        for strategy in self.strategies:
            names = strategy.discover(source_dir)
            if names is None:
                continue

            present = frozenset(
                name for name in names if (source_dir / f"qt{name}").is_dir()
            )
            stale = names - present
            if stale:
                logger.debug(
                    f"Ignoring modules without a directory in {source_dir}: "
                    f"{', '.join(sorted(stale))}"
                )
            return DiscoveryResult(modules=present, source=strategy.name)

        return DiscoveryResult(modules=frozenset(), source=None)

    def discover(self, version: QtVersion) -> Set[str]:
        """
        Return the module names present in a version's source tree.

        An empty set is returned when the tree has no manifest.
        """
        return set(self.inspect(version).modules)
