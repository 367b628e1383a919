"""Toolchain installation discovery and configuration script resolution."""

from .locator import locate
from .resolver import resolve, resolve_explicit, resolve_first

__all__ = ["locate", "resolve", "resolve_explicit", "resolve_first"]
