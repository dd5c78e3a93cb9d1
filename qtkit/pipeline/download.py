"""
Download stage: fetch missing Qt source archives with curl.

Archives are written to "<archive>.part" in the cache root and renamed once
curl succeeds, so a present archive is always a complete one. An interrupted
download is resumed from the .part file on the next attempt or run.
"""

import logging
from pathlib import Path
from typing import List, Optional

from qtkit.core.exceptions import FetchFailure, TransientFetchError
from qtkit.core.process import CURL_POLICY, ExitPolicy, Outcome, ToolRunner
from qtkit.pipeline.base import Stage, is_downloaded, is_unpacked
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


def build_curl_command(url: str, partfile: str, curl: str = "curl") -> List[str]:
    """
    Build the curl command line for a resumable download.

    Args:
        url: Archive URL
        partfile: Output file name, relative to curl's working directory
        curl: curl executable

    Returns:
        Command line
    """
    return [
        curl,
        "--continue-at", "-",
        "--remote-name-all",
        "--location",
        "--output", partfile,
        url,
    ]


class DownloadStage(Stage):
    """Downloads the archives of versions that are neither downloaded nor unpacked."""

    title = "Downloading missing Qt sources"
    done_message = "All Qt sources already present"

    def __init__(
        self,
        cache_dir: Path,
        runner: Optional[ToolRunner] = None,
        policy: ExitPolicy = CURL_POLICY,
        curl: str = "curl",
    ):
        super().__init__(cache_dir, runner)
        self.policy = policy
        self.curl = curl

    def is_done(self, version: QtVersion) -> bool:
        return is_downloaded(version) or is_unpacked(version)

    def describe(self, version: QtVersion) -> str:
        return f"Downloading sources for version {version.semver}"

    def process(self, version: QtVersion) -> None:
        """
        Download one archive, retrying transient network failures.

        Raises:
            FetchFailure: On a non-retryable curl error, or when every
                attempt was interrupted
        """
        url = version.download_url
        destfile = version.archive_name
        partfile = destfile + PART_SUFFIX
        command = build_curl_command(url, partfile, self.curl)

        self.cache_dir.mkdir(parents=True, exist_ok=True)

        last_error: Optional[TransientFetchError] = None
        for attempt in range(1, self.policy.max_attempts + 1):
            result = self.runner.run(command, cwd=self.cache_dir)
            outcome = self.policy.classify(result.exit_code)

            if outcome is Outcome.SUCCESS:
                (self.cache_dir / partfile).replace(self.cache_dir / destfile)
                logger.debug(f"Downloaded {destfile}")
                return

            if outcome is Outcome.FATAL:
                raise FetchFailure(version.semver, url, result.exit_code, attempt)

            last_error = TransientFetchError(
                version.semver, url, result.exit_code, attempt
            )
            if attempt < self.policy.max_attempts:
                logger.warning(f"{last_error}, retrying")

        raise FetchFailure(
            version.semver,
            url,
            last_error.tool_exit_code,
            self.policy.max_attempts,
        ) from last_error
