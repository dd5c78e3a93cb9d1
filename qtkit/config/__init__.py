"""
Configuration loading for QtKit.
"""

from .parser import (
    BindgenConfig,
    QtKitConfig,
    default_config,
    load_config,
    parse_config,
)

__all__ = [
    "BindgenConfig",
    "QtKitConfig",
    "default_config",
    "load_config",
    "parse_config",
]
