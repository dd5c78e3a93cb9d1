"""
Qt descriptors: versions, target platforms, modules and system detection.
"""

from .version import QtVersion, DEFAULT_MIRROR
from .platform import PlatformSpec, TargetPlatform, detect_host_spec
from .modules import (
    ModuleDiscovery,
    ModuleStrategy,
    GitModulesStrategy,
    QtProjectStrategy,
    DiscoveryResult,
)
from .system_probe import probe_system_qt

__all__ = [
    "QtVersion",
    "DEFAULT_MIRROR",
    "PlatformSpec",
    "TargetPlatform",
    "detect_host_spec",
    "ModuleDiscovery",
    "ModuleStrategy",
    "GitModulesStrategy",
    "QtProjectStrategy",
    "DiscoveryResult",
    "probe_system_qt",
]
