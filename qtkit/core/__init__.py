"""
Core functionality for QtKit.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    QtKitError,
    ConfigError,
    InvalidVersionFormat,
    CacheLockTimeout,
    AcquisitionError,
    TransientFetchError,
    FetchFailure,
    ExtractionFailure,
    ConfigureFailure,
    BuildHeaderFailure,
    SystemProbeError,
    ToolNotFound,
    IncompleteProbeResult,
    ManifestParseError,
    GeneratorFailure,
)

from .process import (
    ToolResult,
    ToolRunner,
    ExitPolicy,
    Outcome,
    CURL_POLICY,
)

from .locking import cache_lock

__all__ = [
    # Exceptions
    "QtKitError",
    "ConfigError",
    "InvalidVersionFormat",
    "CacheLockTimeout",
    "AcquisitionError",
    "TransientFetchError",
    "FetchFailure",
    "ExtractionFailure",
    "ConfigureFailure",
    "BuildHeaderFailure",
    "SystemProbeError",
    "ToolNotFound",
    "IncompleteProbeResult",
    "ManifestParseError",
    "GeneratorFailure",
    # Processes
    "ToolResult",
    "ToolRunner",
    "ExitPolicy",
    "Outcome",
    "CURL_POLICY",
    # Locking
    "cache_lock",
]
