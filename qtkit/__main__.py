"""
Entry point for running QtKit CLI as a module.

Usage: python -m qtkit [command] [options]
"""

from qtkit.cli.parser import main

if __name__ == "__main__":
    main()
