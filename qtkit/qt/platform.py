"""
Binding target platforms.

A TargetPlatform pairs a Qt version with the ABI facts the binding generator
needs (OS, libc, architecture, target triple, pointer size, endianness) and
derives the environment the generator is run with.

Usage:
    from qtkit.qt.platform import PlatformSpec, TargetPlatform

    spec = PlatformSpec("linux", "gnu", "x86_64", "5.12.3",
                        "x86_64-unknown-linux-gnu", 8, "little")
    target = TargetPlatform.from_spec(spec, cache_dir=Path("download_cache"))
    print(target.target)  # linux-gnu-x86_64-qt5.12.3
    env = target.environment()
"""

import platform
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple

from qtkit.qt.version import DEFAULT_MIRROR, QtVersion


class PlatformSpec(NamedTuple):
    """One row of the platform table."""

    os: str
    libc: str
    arch: str
    qt: str
    triple: str
    pointer_size: int
    endian: str


@dataclass
class TargetPlatform:
    """
    A platform bindings are generated for.

    The override fields (qt_dir, qmake, libs_dir, include_dir) default to the
    locations inside the configured source tree. System-probe mode points
    them at an installed Qt instead.
    """

    os: str
    libc: str
    arch: str
    qt: QtVersion
    triple: str
    pointer_size: int
    endian: str
    qt_dir: Optional[Path] = None
    qmake: Optional[Path] = None
    libs_dir: Optional[Path] = None
    include_dir: Optional[Path] = None

    def __post_init__(self):
        if self.qt_dir is None:
            self.qt_dir = self.qt.path
        if self.qmake is None:
            self.qmake = self.qt.qmake_path
        if self.libs_dir is None:
            self.libs_dir = self.qt.path / "qtbase" / "libs"

    @classmethod
    def from_spec(
        cls, spec: PlatformSpec, cache_dir: Path, mirror: str = DEFAULT_MIRROR
    ) -> "TargetPlatform":
        """
        Build a platform from a table row.

        Raises:
            InvalidVersionFormat: If the Qt version is malformed
        """
        return cls(
            os=spec.os,
            libc=spec.libc,
            arch=spec.arch,
            qt=QtVersion.parse(spec.qt, cache_dir, mirror),
            triple=spec.triple,
            pointer_size=spec.pointer_size,
            endian=spec.endian,
        )

    @property
    def target(self) -> str:
        """Unique identifier, e.g. 'linux-gnu-x86_64-qt5.12.3'."""
        return f"{self.os}-{self.libc}-{self.arch}-qt{self.qt}"

    def environment(self) -> Dict[str, str]:
        """
        Environment variables for the binding generator.

        QT_INCLUDE_DIR is only present when an include directory was set
        explicitly; otherwise the generator detects it on its own.
        """
        env = {
            "QTDIR": str(self.qt_dir),
            "QMAKE": str(self.qmake),
            "QT_LIBS_DIR": str(self.libs_dir),
            "TARGET_TRIPLE": self.triple,
            "BINDING_PLATFORM": self.target,
        }
        if self.include_dir is not None:
            env["QT_INCLUDE_DIR"] = str(self.include_dir)
        return env

    def generator_variables(self) -> List[Tuple[str, str]]:
        """Variables passed to the generator as --var name=value."""
        return [
            ("architecture", self.arch),
            ("libc", self.libc),
            ("os", self.os),
            ("pointersize", str(self.pointer_size)),
            ("endian", self.endian),
        ]

    def __str__(self) -> str:
        return self.target


# ============================================================================
# Host Detection
# ============================================================================


def _detect_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return "darwin"
    return system or "unknown"


def _detect_libc(os_name: str) -> str:
    if os_name != "linux":
        return "unknown"
    libc, _ = platform.libc_ver()
    if libc == "glibc":
        return "gnu"
    # platform.libc_ver() returns empty for musl
    return "musl"


def _detect_arch() -> str:
    machine = platform.machine().lower()
    arch_map = {
        "amd64": "x86_64",
        "x64": "x86_64",
        "arm64": "aarch64",
        "i386": "i686",
    }
    return arch_map.get(machine, machine)


def detect_host_spec(qt_version: str) -> PlatformSpec:
    """
    Describe the running host as a platform table row.

    Args:
        qt_version: Qt version to pair with the host

    Returns:
        PlatformSpec for the host
    """
    os_name = _detect_os()
    libc = _detect_libc(os_name)
    arch = _detect_arch()

    if os_name == "linux":
        triple = f"{arch}-unknown-linux-{libc}"
    elif os_name == "darwin":
        triple = f"{arch}-apple-darwin"
    else:
        triple = f"{arch}-unknown-{os_name}"

    return PlatformSpec(
        os=os_name,
        libc=libc,
        arch=arch,
        qt=qt_version,
        triple=triple,
        pointer_size=struct.calcsize("P"),
        endian=sys.byteorder,
    )
