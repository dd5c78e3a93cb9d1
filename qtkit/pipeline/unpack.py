"""
Unpack stage: extract downloaded archives into the cache root.
"""

import logging
from pathlib import Path
from typing import List, Optional

from qtkit.core.exceptions import ExtractionFailure
from qtkit.core.process import ToolRunner
from qtkit.pipeline.base import Stage, is_unpacked
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)


def build_tar_command(archive: Path, destination: Path, tar: str = "tar") -> List[str]:
    """tar command extracting archive (compression auto-detected) into destination."""
    return [tar, "-C", str(destination), "-xaf", str(archive)]


class UnpackStage(Stage):
    """Extracts the archive of every version whose source tree is missing."""

    title = "Unpacking Qt sources"
    done_message = "All Qt sources already unpacked"

    def __init__(
        self, cache_dir: Path, runner: Optional[ToolRunner] = None, tar: str = "tar"
    ):
        super().__init__(cache_dir, runner)
        self.tar = tar

    def is_done(self, version: QtVersion) -> bool:
        return is_unpacked(version)

    def describe(self, version: QtVersion) -> str:
        return f"Unpacking Qt version {version.semver}"

    def process(self, version: QtVersion) -> None:
        """
        Raises:
            ExtractionFailure: If tar exits with an error
        """
        archive = version.archive_path
        result = self.runner.run(build_tar_command(archive, self.cache_dir, self.tar))
        if not result.success:
            raise ExtractionFailure(version.semver, archive, result.exit_code)
        logger.debug(f"Unpacked {archive.name} to {version.path}")
