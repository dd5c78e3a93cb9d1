"""YAML configuration parser for QtKit.

This module provides parsing and validation for qtkit.yaml, which holds the
platform table and the locations QtKit works with. A project without a
qtkit.yaml uses the built-in defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from qtkit.core.exceptions import ConfigError, InvalidVersionFormat
from qtkit.qt.platform import PlatformSpec
from qtkit.qt.version import DEFAULT_MIRROR, parse_components

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "qtkit.yaml"

DEFAULT_CACHE_DIR = "download_cache"

DEFAULT_PLATFORMS = [
    #            OS       LIBC   ARCH      Qt        Clang target triple        Ptr  Endian
    PlatformSpec("linux", "gnu", "x86_64", "5.12.3", "x86_64-unknown-linux-gnu", 8, "little"),
]

PLATFORM_FIELDS = PlatformSpec._fields

# Environment variable -> config attribute
ENV_OVERRIDES = {
    "QTKIT_CACHE_DIR": "cache_dir",
    "QTKIT_MIRROR": "mirror",
}


@dataclass
class BindgenConfig:
    """Binding generator invocation."""

    tool: str = "lib/bindgen/tool.sh"  # relative to the project root
    manifest: str = "qt.yml"


@dataclass
class QtKitConfig:
    """Complete QtKit configuration."""

    project_root: Path
    cache_dir: Path
    version: int = 1
    mirror: str = DEFAULT_MIRROR
    keep_modules: List[str] = field(default_factory=lambda: ["base"])
    lock_timeout: float = 600
    bindgen: BindgenConfig = field(default_factory=BindgenConfig)
    platforms: List[PlatformSpec] = field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    system: bool = False  # use the host's installed Qt instead of building one

    @property
    def bindgen_tool(self) -> Path:
        """Absolute path of the generator tool."""
        tool = Path(self.bindgen.tool)
        if not tool.is_absolute():
            tool = self.project_root / tool
        return tool


def default_config(project_root: Path) -> QtKitConfig:
    """Configuration used when the project has no qtkit.yaml."""
    project_root = Path(project_root)
    return QtKitConfig(
        project_root=project_root, cache_dir=project_root / DEFAULT_CACHE_DIR
    )


def load_config(
    project_root: Path,
    config_path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> QtKitConfig:
    """
    Load the project configuration.

    An explicitly given config file must exist; the default
    <project_root>/qtkit.yaml is optional.

    Args:
        project_root: Project root directory
        config_path: Explicit configuration file
        environ: Environment for overrides (default: os.environ)

    Returns:
        Parsed configuration with environment overrides applied

    Raises:
        ConfigError: If the configuration is missing or invalid
    """
    project_root = Path(project_root)

    if config_path is not None:
        config = parse_config(Path(config_path), project_root)
    else:
        default_path = project_root / CONFIG_FILE_NAME
        if default_path.exists():
            config = parse_config(default_path, project_root)
        else:
            logger.debug(f"No {CONFIG_FILE_NAME} in {project_root}, using defaults")
            config = default_config(project_root)

    apply_env_overrides(config, os.environ if environ is None else environ)
    return config


def apply_env_overrides(config: QtKitConfig, environ: Dict[str, str]) -> None:
    """Apply QTKIT_* environment variables to a configuration in place."""
    for var, attribute in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        logger.debug(f"Overriding {attribute} from {var}")
        if attribute == "cache_dir":
            config.cache_dir = _resolve(config.project_root, value)
        else:
            setattr(config, attribute, value)


def parse_config(config_path: Path, project_root: Path) -> QtKitConfig:
    """
    Parse qtkit.yaml configuration file.

    Args:
        config_path: Path to qtkit.yaml
        project_root: Directory relative paths are resolved against

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data, Path(project_root))


def _resolve(project_root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = project_root / path
    return path


def _parse_and_validate(data: dict, project_root: Path) -> QtKitConfig:
    """Parse and validate configuration data."""
    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    config = default_config(project_root)

    if "cache_dir" in data:
        if not isinstance(data["cache_dir"], str) or not data["cache_dir"]:
            raise ConfigError("cache_dir must be a non-empty string")
        config.cache_dir = _resolve(project_root, data["cache_dir"])

    if "mirror" in data:
        if not isinstance(data["mirror"], str) or not data["mirror"]:
            raise ConfigError("mirror must be a non-empty string")
        config.mirror = data["mirror"]

    if "keep_modules" in data:
        keep = data["keep_modules"]
        if not isinstance(keep, list) or not all(isinstance(m, str) for m in keep):
            raise ConfigError("keep_modules must be a list of module names")
        config.keep_modules = list(keep)

    if "lock_timeout" in data:
        timeout = data["lock_timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ConfigError("lock_timeout must be a number of seconds")
        config.lock_timeout = timeout

    if "bindgen" in data:
        config.bindgen = _parse_bindgen(data["bindgen"])

    if "platforms" in data:
        platforms = data["platforms"]
        if not isinstance(platforms, list) or not platforms:
            raise ConfigError("At least one platform must be defined")
        config.platforms = [
            _parse_platform(entry, index) for index, entry in enumerate(platforms)
        ]

    return config


def _parse_bindgen(data: Any) -> BindgenConfig:
    if not isinstance(data, dict):
        raise ConfigError("bindgen must be a mapping")

    bindgen = BindgenConfig()
    for key in ("tool", "manifest"):
        if key in data:
            if not isinstance(data[key], str) or not data[key]:
                raise ConfigError(f"bindgen.{key} must be a non-empty string")
            setattr(bindgen, key, data[key])
    return bindgen


def _parse_platform(entry: Any, index: int) -> PlatformSpec:
    """
    Parse one platform entry.

    Entries are either mappings with the PlatformSpec field names or
    seven-item lists in field order.
    """
    where = f"platforms[{index}]"

    if isinstance(entry, list):
        if len(entry) != len(PLATFORM_FIELDS):
            raise ConfigError(
                f"{where}: expected {len(PLATFORM_FIELDS)} items "
                f"({', '.join(PLATFORM_FIELDS)}), got {len(entry)}"
            )
        values = dict(zip(PLATFORM_FIELDS, entry))
    elif isinstance(entry, dict):
        missing = [name for name in PLATFORM_FIELDS if name not in entry]
        if missing:
            raise ConfigError(f"{where}: missing required field(s): {', '.join(missing)}")
        unknown = sorted(set(entry) - set(PLATFORM_FIELDS))
        if unknown:
            raise ConfigError(f"{where}: unknown field(s): {', '.join(unknown)}")
        values = entry
    else:
        raise ConfigError(f"{where}: must be a mapping or a list")

    pointer_size = values["pointer_size"]
    if isinstance(pointer_size, bool) or not isinstance(pointer_size, int):
        raise ConfigError(f"{where}: pointer_size must be an integer")

    # YAML reads an unquoted 5.10 as the float 5.1
    if isinstance(values["qt"], float):
        raise ConfigError(f'{where}: qt version must be quoted (e.g. "5.12")')
    qt = str(values["qt"])
    try:
        parse_components(qt)
    except InvalidVersionFormat as e:
        raise ConfigError(f"{where}: {e}")

    text_fields = {}
    for name in ("os", "libc", "arch", "triple", "endian"):
        value = values[name]
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{where}: {name} must be a non-empty string")
        text_fields[name] = value

    return PlatformSpec(qt=qt, pointer_size=pointer_size, **text_fields)
