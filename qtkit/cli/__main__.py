"""
Entry point for running QtKit CLI as a module.

Usage: python -m qtkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
