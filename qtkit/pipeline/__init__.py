"""
Qt acquisition pipeline: download, unpack and configure stages and the
orchestrator that runs them.
"""

from .base import Stage, unique_versions
from .download import DownloadStage
from .unpack import UnpackStage
from .configure import ConfigureStage
from .orchestrator import Orchestrator

__all__ = [
    "Stage",
    "unique_versions",
    "DownloadStage",
    "UnpackStage",
    "ConfigureStage",
    "Orchestrator",
]
