"""
Pipeline orchestration.

The orchestrator turns a QtKitConfig into target platforms, prepares the Qt
trees they need (download, unpack, configure) and runs the binding generator
for each platform in declaration order:

    orchestrator = Orchestrator(load_config(Path.cwd()))
    orchestrator.run()

In system mode the platform list is a single platform describing the host's
installed Qt, and the preparation stages are skipped.
"""

import logging
from typing import List, Optional, Sequence

from qtkit.bindgen.generator import BindingGenerator
from qtkit.config.parser import QtKitConfig
from qtkit.core.locking import cache_lock
from qtkit.core.process import ToolRunner
from qtkit.core.progress import report, report_step
from qtkit.pipeline.base import Stage, unique_versions
from qtkit.pipeline.configure import ConfigureStage
from qtkit.pipeline.download import DownloadStage
from qtkit.pipeline.unpack import UnpackStage
from qtkit.qt.modules import ModuleDiscovery
from qtkit.qt.platform import TargetPlatform
from qtkit.qt.system_probe import probe_system_qt
from qtkit.qt.version import QtVersion

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Runs the complete QtKit workflow for a configuration.

    Attributes:
        config: Configuration the run is based on
        runner: Tool runner shared by every stage and the generator
    """

    def __init__(self, config: QtKitConfig, runner: Optional[ToolRunner] = None):
        self.config = config
        self.runner = runner or ToolRunner()

    def build_platforms(self) -> List[TargetPlatform]:
        """
        Create the target platforms.

        Raises:
            InvalidVersionFormat: If a configured Qt version is malformed
            SystemProbeError: In system mode, if the installed Qt can't be probed
        """
        if self.config.system:
            return [
                probe_system_qt(
                    self.config.cache_dir, self.runner, mirror=self.config.mirror
                )
            ]

        return [
            TargetPlatform.from_spec(spec, self.config.cache_dir, self.config.mirror)
            for spec in self.config.platforms
        ]

    def stages(self) -> List[Stage]:
        """Preparation stages, in execution order."""
        cache_dir = self.config.cache_dir
        return [
            DownloadStage(cache_dir, self.runner),
            UnpackStage(cache_dir, self.runner),
            ConfigureStage(
                cache_dir,
                self.runner,
                discovery=ModuleDiscovery(),
                keep_modules=self.config.keep_modules,
            ),
        ]

    def prepare(self, versions: Sequence[QtVersion]) -> None:
        """
        Bring every version to the configured state.

        Raises:
            AcquisitionError: On the first failing version
        """
        versions = unique_versions(versions)
        for stage in self.stages():
            stage.run(versions)

    def generator(self) -> BindingGenerator:
        return BindingGenerator(
            tool=self.config.bindgen_tool,
            manifest=self.config.bindgen.manifest,
            cwd=self.config.project_root,
            runner=self.runner,
        )

    def generate(self, platforms: Sequence[TargetPlatform]) -> None:
        """
        Run the binding generator for each platform, in order.

        Raises:
            GeneratorFailure: On the first failing platform
        """
        generator = self.generator()
        report_step("Generating bindings for all platforms")
        for idx, platform in enumerate(platforms):
            report(idx, len(platforms), f"Generating {platform.target}")
            generator.generate(platform)

    def run_prepare(self) -> List[TargetPlatform]:
        """
        Build the platforms and prepare their Qt trees, without generating.

        Returns:
            The target platforms
        """
        platforms = self.build_platforms()
        if self.config.system:
            logger.info("Using system Qt, skipping download, unpack and configure")
            return platforms

        with cache_lock(self.config.cache_dir, self.config.lock_timeout):
            self.prepare([platform.qt for platform in platforms])
        return platforms

    def run(self) -> List[TargetPlatform]:
        """
        Prepare all Qt trees and generate bindings for every platform.

        Returns:
            The platforms bindings were generated for

        Raises:
            QtKitError: On the first failure of any step
        """
        platforms = self.build_platforms()

        if self.config.system:
            logger.info("Using system Qt, skipping download, unpack and configure")
            self.generate(platforms)
            return platforms

        with cache_lock(self.config.cache_dir, self.config.lock_timeout):
            self.prepare([platform.qt for platform in platforms])
            self.generate(platforms)
        return platforms
