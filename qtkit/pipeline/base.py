"""
Common shape of the acquisition pipeline stages.

Each stage looks at the cache on disk, works out which versions still need
its step, and processes them one after the other. The first failure raises
and aborts the run; whatever was completed stays on disk for the next run.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from qtkit.core.process import ToolRunner
from qtkit.core.progress import report, report_step
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)


def unique_versions(versions: Iterable[QtVersion]) -> List[QtVersion]:
    """
    Remove duplicate versions, keeping the first occurrence of each.

    Versions compare by their version string, so platforms sharing a Qt
    release download, unpack and configure it only once.
    """
    seen = set()
    result = []
    for version in versions:
        if version in seen:
            continue
        seen.add(version)
        result.append(version)
    return result


def is_configured(version: QtVersion) -> bool:
    """True if the tree has an executable qmake (configure has completed)."""
    return version.qmake_path.is_file() and os.access(version.qmake_path, os.X_OK)


def is_unpacked(version: QtVersion) -> bool:
    """True if the source tree exists in the cache."""
    return version.path.is_dir()


def is_downloaded(version: QtVersion) -> bool:
    """True if the source archive exists in the cache."""
    return version.archive_path.is_file()


class Stage(ABC):
    """
    One idempotent step of the pipeline.

    Subclasses define which versions are pending and how one version is
    processed.
    """

    #: Heading logged when there is work to do
    title: str = ""
    #: Message logged when every version is already done
    done_message: str = ""

    def __init__(self, cache_dir: Path, runner: Optional[ToolRunner] = None):
        self.cache_dir = Path(cache_dir)
        self.runner = runner or ToolRunner()

    @abstractmethod
    def is_done(self, version: QtVersion) -> bool:
        """True if this stage (or a later one) already completed for version."""
        pass

    @abstractmethod
    def describe(self, version: QtVersion) -> str:
        """Progress message for processing a version."""
        pass

    @abstractmethod
    def process(self, version: QtVersion) -> None:
        """
        Perform this stage for a single version.

        Raises:
            AcquisitionError: If the external tool fails
        """
        pass

    def pending(self, versions: Iterable[QtVersion]) -> List[QtVersion]:
        """Versions this stage still has to process, in order."""
        return [v for v in unique_versions(versions) if not self.is_done(v)]

    def run(self, versions: Iterable[QtVersion]) -> List[QtVersion]:
        """
        Process every pending version.

        Args:
            versions: Versions to bring to this stage's state

        Returns:
            Versions that were processed (empty if nothing was pending)

        Raises:
            AcquisitionError: On the first failing version
        """
        todo = self.pending(versions)
        if not todo:
            report_step(self.done_message)
            return []

        report_step(self.title)
        for idx, version in enumerate(todo):
            report(idx, len(todo), self.describe(version))
            self.process(version)
        return todo
