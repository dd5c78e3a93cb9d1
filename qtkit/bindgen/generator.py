"""
Binding generator invocation.

The generator is an external tool run once per platform:

    lib/bindgen/tool.sh qt.yml --var architecture=x86_64 --var libc=gnu ...

with the platform's environment (QTDIR, QMAKE, ...) merged over QtKit's own.
"""

import logging
from pathlib import Path
from typing import List, Optional

from qtkit.core.exceptions import GeneratorFailure
from qtkit.core.process import ToolRunner
from qtkit.qt.platform import TargetPlatform

logger = logging.getLogger(__name__)


class BindingGenerator:
    """
    Runs the binding generator for target platforms.

    Attributes:
        tool: Generator executable
        manifest: Manifest file passed as the first argument
        cwd: Working directory the generator runs in (the project root)
    """

    def __init__(
        self,
        tool: Path,
        manifest: str = "qt.yml",
        cwd: Optional[Path] = None,
        runner: Optional[ToolRunner] = None,
    ):
        self.tool = Path(tool)
        self.manifest = manifest
        self.cwd = cwd
        self.runner = runner or ToolRunner()

    def arguments(self, platform: TargetPlatform) -> List[str]:
        """Generator arguments for a platform."""
        args = [self.manifest]
        for name, value in platform.generator_variables():
            args += ["--var", f"{name}={value}"]
        return args

    def generate(self, platform: TargetPlatform) -> None:
        """
        Generate the bindings of one platform.

        Raises:
            GeneratorFailure: If the generator exits with an error
        """
        env = platform.environment()
        for key, value in env.items():
            logger.debug(f"  {key}={value}")

        result = self.runner.run(
            [self.tool] + self.arguments(platform), cwd=self.cwd, env=env
        )
        if not result.success:
            raise GeneratorFailure(
                platform.target, platform.qt.name, platform.triple, result.exit_code
            )
