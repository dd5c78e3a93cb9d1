"""
System Qt detection.

In system mode QtKit skips downloading and building Qt and instead points
the binding generator at a Qt already installed on the host. The installed
Qt is described by its own qmake:

    $ qmake -query
    QT_INSTALL_PREFIX:/usr
    QT_INSTALL_HEADERS:/usr/include/qt
    QT_INSTALL_LIBS:/usr/lib
    QT_VERSION:5.15.2
    ...
"""

import logging
import re
import shutil
from pathlib import Path
from typing import Dict, Iterable, Optional

from qtkit.core.exceptions import (
    IncompleteProbeResult,
    SystemProbeError,
    ToolNotFound,
)
from qtkit.core.process import ToolRunner
from qtkit.qt.platform import TargetPlatform, detect_host_spec
from qtkit.qt.version import DEFAULT_MIRROR

logger = logging.getLogger(__name__)

# Distributions that ship Qt 4 and Qt 5 side by side name the Qt 5 one qmake-qt5
QMAKE_CANDIDATES = ("qmake-qt5", "qmake")

# Probe field -> pattern matching its qmake -query line
QUERY_PATTERNS = {
    "prefix": re.compile(r"^QT_INSTALL_PREFIX:(.+)$"),
    "headers": re.compile(r"^QT_INSTALL_HEADERS:(.+)$"),
    "libs": re.compile(r"^QT_INSTALL_LIBS:(.+)$"),
    "version": re.compile(r"^QT_VERSION:(\d+\.\d+)"),
}

QUERY_KEYS = {
    "prefix": "QT_INSTALL_PREFIX",
    "headers": "QT_INSTALL_HEADERS",
    "libs": "QT_INSTALL_LIBS",
    "version": "QT_VERSION",
}


def find_qmake(candidates: Iterable[str] = QMAKE_CANDIDATES) -> Path:
    """
    Locate the first available qmake executable on PATH.

    Args:
        candidates: Executable names to try, in order

    Returns:
        Absolute path to qmake

    Raises:
        ToolNotFound: If none of the candidates is on PATH
    """
    candidates = tuple(candidates)
    for name in candidates:
        found = shutil.which(name)
        if found:
            logger.debug(f"Found Qt query tool: {found}")
            return Path(found)
    raise ToolNotFound(candidates)


def parse_query_output(output: str) -> Dict[str, Optional[str]]:
    """
    Extract the probe fields from `qmake -query` output.

    Unknown keys are ignored. The version is truncated to major.minor.

    Args:
        output: Raw stdout of qmake -query

    Returns:
        Dictionary with keys 'prefix', 'headers', 'libs', 'version';
        values are None for keys missing from the output
    """
    values: Dict[str, Optional[str]] = {field: None for field in QUERY_PATTERNS}
    for line in output.splitlines():
        line = line.strip()
        for field, pattern in QUERY_PATTERNS.items():
            match = pattern.match(line)
            if match and values[field] is None:
                values[field] = match.group(1).strip()
    return values


def probe_system_qt(
    cache_dir: Path,
    runner: Optional[ToolRunner] = None,
    candidates: Iterable[str] = QMAKE_CANDIDATES,
    mirror: str = DEFAULT_MIRROR,
) -> TargetPlatform:
    """
    Build a TargetPlatform for the host's installed Qt.

    Args:
        cache_dir: Download cache root for the probed QtVersion
        runner: Tool runner (default: ToolRunner())
        candidates: qmake executable names to try, in order
        mirror: Archive mirror for the probed QtVersion

    Returns:
        TargetPlatform with QTDIR, QMAKE, library and include directories
        taken from the installed Qt

    Raises:
        ToolNotFound: If no qmake is available
        SystemProbeError: If qmake -query exits with an error
        IncompleteProbeResult: If a required key is missing from the output
    """
    runner = runner or ToolRunner()
    qmake = find_qmake(candidates)

    result = runner.run([qmake, "-query"], capture=True)
    if not result.success:
        raise SystemProbeError(
            f"{qmake} -query failed with exit code {result.exit_code}: "
            f"{result.stderr.strip()}"
        )

    values = parse_query_output(result.stdout)
    missing = [QUERY_KEYS[field] for field, value in values.items() if not value]
    if missing:
        raise IncompleteProbeResult(qmake, missing)

    logger.info(f"Using system Qt {values['version']} from {values['prefix']}")

    spec = detect_host_spec(values["version"])
    target = TargetPlatform.from_spec(spec, cache_dir, mirror)
    target.qt_dir = Path(values["prefix"])
    target.qmake = qmake
    target.libs_dir = Path(values["libs"])
    target.include_dir = Path(values["headers"])
    return target
