"""
QtKit CLI argument parser.

This module implements the command-line interface for QtKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from qtkit.core.exceptions import QtKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("qtkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """QtKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="qtkit",
            description="QtKit - prepare Qt source trees and generate bindings",
            epilog='Use "qtkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"QtKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./qtkit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="PATH",
            help="Download cache for Qt archives and trees (default: ./download_cache)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_generate_command(subparsers)
        self._add_prepare_command(subparsers)
        self._add_modules_command(subparsers)
        self._add_platforms_command(subparsers)

        return parser

    def _add_generate_command(self, subparsers):
        """Add 'generate' subcommand."""
        parser = subparsers.add_parser(
            "generate",
            help="Prepare Qt and generate bindings for all platforms",
            description=(
                "Download, unpack and configure the Qt versions of all configured "
                "platforms, then run the binding generator for each platform"
            ),
        )
        self._add_system_flag(parser)
        parser.add_argument(
            "--bindgen-tool",
            metavar="PATH",
            help="Binding generator executable (default: lib/bindgen/tool.sh)",
        )
        parser.add_argument(
            "--manifest",
            metavar="FILE",
            help="Manifest passed to the generator (default: qt.yml)",
        )

    def _add_prepare_command(self, subparsers):
        """Add 'prepare' subcommand."""
        parser = subparsers.add_parser(
            "prepare",
            help="Download, unpack and configure Qt without generating bindings",
            description=(
                "Download, unpack and configure the Qt versions of all platforms. "
                "With --system, only check that the installed Qt can be probed"
            ),
        )
        self._add_system_flag(parser)

    def _add_modules_command(self, subparsers):
        """Add 'modules' subcommand."""
        parser = subparsers.add_parser(
            "modules",
            help="List the modules of an unpacked Qt tree",
            description="List the modules found in an unpacked Qt source tree",
        )
        parser.add_argument("qt_version", metavar="VERSION", help="Qt version (e.g., 5.12.3)")

    def _add_platforms_command(self, subparsers):
        """Add 'platforms' subcommand."""
        parser = subparsers.add_parser(
            "platforms",
            help="List target platforms and their generator environment",
            description="List target platforms and their generator environment",
        )
        self._add_system_flag(parser)

    def _add_system_flag(self, parser):
        parser.add_argument(
            "--system",
            action="store_true",
            help="Use the Qt installed on this system (found via qmake) instead of building one",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, 1 for generator failures, 2 for
            preparation failures)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 2

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except QtKitError as e:
            logger.error(str(e))
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return e.exit_code
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 2

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "generate": "qtkit.cli.commands.generate",
            "prepare": "qtkit.cli.commands.prepare",
            "modules": "qtkit.cli.commands.modules",
            "platforms": "qtkit.cli.commands.platforms",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 2

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
