"""
Binding generator integration.
"""

from .generator import BindingGenerator

__all__ = ["BindingGenerator"]
