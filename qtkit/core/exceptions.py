"""
Centralized exception hierarchy for QtKit.

Every exception carries the process exit code the CLI reports for it:
2 for acquisition, configuration and probe failures, 1 for generator
failures.
"""

from pathlib import Path
from typing import Iterable, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class QtKitError(Exception):
    """Base exception for all QtKit errors."""

    exit_code = 2


class ConfigError(QtKitError):
    """Configuration parsing or validation error."""

    pass


class InvalidVersionFormat(QtKitError, ValueError):
    """Raised when a Qt version string cannot be parsed."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        msg = f"Invalid Qt version format: {raw!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class CacheLockTimeout(QtKitError):
    """Raised when the download cache lock cannot be acquired within timeout."""

    def __init__(self, lock_path: Path, timeout: float):
        self.lock_path = lock_path
        self.timeout = timeout
        super().__init__(
            f"Could not lock download cache {lock_path} within {timeout}s "
            f"(is another qtkit process running?)"
        )


# ============================================================================
# Acquisition Exceptions (download, unpack, configure)
# ============================================================================


class AcquisitionError(QtKitError):
    """Base exception for failures while preparing a Qt source tree."""

    def __init__(self, message: str, version: str, exit_code: Optional[int] = None):
        self.version = version
        self.tool_exit_code = exit_code
        super().__init__(message)


class TransientFetchError(AcquisitionError):
    """Download was interrupted by the remote party and may be retried."""

    def __init__(self, version: str, url: str, exit_code: int, attempt: int):
        self.url = url
        self.attempt = attempt
        super().__init__(
            f"Download of Qt {version} from {url} interrupted "
            f"(curl exit code {exit_code}, attempt {attempt})",
            version,
            exit_code,
        )


class FetchFailure(AcquisitionError):
    """Raised when a Qt source archive cannot be downloaded."""

    def __init__(self, version: str, url: str, exit_code: int, attempts: int = 1):
        self.url = url
        self.attempts = attempts
        msg = f"Failed to download Qt source for version {version} from {url}"
        msg += f" (curl exit code {exit_code}"
        if attempts > 1:
            msg += f" after {attempts} attempts"
        msg += ")"
        super().__init__(msg, version, exit_code)


class ExtractionFailure(AcquisitionError):
    """Raised when a Qt source archive cannot be unpacked."""

    def __init__(self, version: str, archive: Path, exit_code: int):
        self.archive = archive
        super().__init__(
            f"Failed to unpack Qt source for version {version} from {archive} "
            f"(tar exit code {exit_code})",
            version,
            exit_code,
        )


class ConfigureFailure(AcquisitionError):
    """Raised when ./configure fails for a Qt source tree."""

    def __init__(self, version: str, path: Path, exit_code: int):
        self.path = path
        super().__init__(
            f"Failed to configure Qt{version} in {path} - Abort. "
            f"(configure exit code {exit_code})",
            version,
            exit_code,
        )


class BuildHeaderFailure(AcquisitionError):
    """Raised when generating the Qt headers (make qmake_all) fails."""

    def __init__(self, version: str, path: Path, exit_code: int):
        self.path = path
        super().__init__(
            f"Failed to generate headers for Qt{version} in {path} - Abort. "
            f"(make exit code {exit_code})",
            version,
            exit_code,
        )


# ============================================================================
# Module Discovery Exceptions
# ============================================================================


class ManifestParseError(QtKitError):
    """Raised when a Qt source tree's module manifest cannot be parsed."""

    def __init__(self, manifest: Path, reason: str):
        self.manifest = manifest
        self.source_dir = manifest.parent
        super().__init__(
            f"Failed to read Qt modules of {self.source_dir} from {manifest.name}: {reason}"
        )


# ============================================================================
# System Probe Exceptions
# ============================================================================


class SystemProbeError(QtKitError):
    """Base exception for failures while probing an installed Qt."""

    pass


class ToolNotFound(SystemProbeError):
    """None of the candidate qmake executables could be found."""

    def __init__(self, candidates: Iterable[str]):
        self.candidates = tuple(candidates)
        super().__init__(
            f"Could not find a Qt query tool on PATH (tried: {', '.join(self.candidates)})"
        )


class IncompleteProbeResult(SystemProbeError):
    """qmake -query output lacked one or more required keys."""

    def __init__(self, tool: Path, missing: Iterable[str]):
        self.tool = tool
        self.missing = tuple(missing)
        super().__init__(
            f"{tool} -query did not report: {', '.join(self.missing)}"
        )


# ============================================================================
# Generator Exceptions
# ============================================================================


class GeneratorFailure(QtKitError):
    """Raised when the binding generator fails for a platform."""

    exit_code = 1

    def __init__(self, target: str, version: str, triple: str, exit_code: int):
        self.target = target
        self.version = version
        self.triple = triple
        self.tool_exit_code = exit_code
        super().__init__(
            f"Failed to build {target} using Qt{version} on {triple} - Abort. "
            f"(generator exit code {exit_code})"
        )
