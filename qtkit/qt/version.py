"""
Qt version descriptors.

A QtVersion turns a version string such as "5.12.3" into the archive name,
download URL and on-disk locations used by the pipeline. Qt changed the
name of its source archives in 5.12 ("qt-everywhere-src-*"); older
releases use "qt-everywhere-opensource-src-*".

Usage:
    from qtkit.qt.version import QtVersion

    qt = QtVersion.parse("5.12.3", Path("download_cache"))
    print(qt.download_url)
    # https://download.qt.io/archive/qt/5.12/5.12.3/single/qt-everywhere-src-5.12.3.tar.xz
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from qtkit.core.exceptions import InvalidVersionFormat

DEFAULT_MIRROR = "https://download.qt.io/archive/qt"

# First release whose archives drop the "opensource" infix
SRC_NAMING_SINCE = (5, 12)

ARCHIVE_EXTENSION = ".tar.xz"


def parse_components(raw: str) -> Tuple[int, int, int]:
    """
    Parse a dotted version string into (major, minor, patch).

    Missing trailing components default to 0. Components past the third are
    validated but otherwise ignored.

    Args:
        raw: Version string (e.g., '5', '5.12', '5.12.3')

    Returns:
        Tuple of (major, minor, patch)

    Raises:
        InvalidVersionFormat: If the string is empty or a component is not numeric

    Example:
        >>> parse_components("5.9")
        (5, 9, 0)
    """
    if not raw or not raw.strip():
        raise InvalidVersionFormat(raw, "empty version")

    parts = raw.strip().split(".")
    for part in parts:
        if not (part.isascii() and part.isdigit()):
            raise InvalidVersionFormat(raw, f"component {part!r} is not a number")

    numbers = [int(part) for part in parts[:3]]
    numbers += [0] * (3 - len(numbers))
    return numbers[0], numbers[1], numbers[2]


@dataclass(frozen=True, eq=False)
class QtVersion:
    """
    A Qt release and the paths derived from it.

    Two descriptors with the same version string are interchangeable; equality
    and hashing only look at the name.

    Attributes:
        name: Version string as written in the configuration
        cache_dir: Download cache root holding archives and unpacked trees
        mirror: Base URL of the Qt release archive
        major: Major version
        minor: Minor version
        patch: Patch version (0 if not given)
    """

    name: str
    cache_dir: Path
    mirror: str = DEFAULT_MIRROR
    major: int = field(init=False)
    minor: int = field(init=False)
    patch: int = field(init=False)

    def __post_init__(self):
        major, minor, patch = parse_components(self.name)
        object.__setattr__(self, "major", major)
        object.__setattr__(self, "minor", minor)
        object.__setattr__(self, "patch", patch)
        object.__setattr__(self, "cache_dir", Path(self.cache_dir))
        object.__setattr__(self, "mirror", self.mirror.rstrip("/"))

    @classmethod
    def parse(
        cls, raw: str, cache_dir: Path, mirror: str = DEFAULT_MIRROR
    ) -> "QtVersion":
        """
        Parse a version string.

        Raises:
            InvalidVersionFormat: If the version string is malformed
        """
        return cls(name=raw, cache_dir=cache_dir, mirror=mirror)

    def __eq__(self, other) -> bool:
        if not isinstance(other, QtVersion):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    @property
    def semver_short(self) -> str:
        """'major.minor'"""
        return f"{self.major}.{self.minor}"

    @property
    def semver(self) -> str:
        """'major.minor.patch'"""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def uses_src_naming(self) -> bool:
        """True for releases named qt-everywhere-src-* (5.12 and later)."""
        return (self.major, self.minor) >= SRC_NAMING_SINCE

    @property
    def source_dir_name(self) -> str:
        """Top-level directory name inside the source archive."""
        if self.uses_src_naming:
            return f"qt-everywhere-src-{self.semver}"
        return f"qt-everywhere-opensource-src-{self.semver}"

    @property
    def archive_name(self) -> str:
        """File name of the source archive."""
        return f"{self.source_dir_name}{ARCHIVE_EXTENSION}"

    @property
    def download_url(self) -> str:
        """URL of the single-archive source release."""
        return f"{self.mirror}/{self.semver_short}/{self.semver}/single/{self.archive_name}"

    @property
    def archive_path(self) -> Path:
        """Location of the downloaded archive in the cache."""
        return self.cache_dir / self.archive_name

    @property
    def path(self) -> Path:
        """Location of the unpacked source tree in the cache."""
        return self.cache_dir / self.source_dir_name

    @property
    def qmake_path(self) -> Path:
        """qmake produced by configuring the tree."""
        return self.path / "qtbase" / "bin" / "qmake"
