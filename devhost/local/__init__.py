"""
Local package for the DevHost supervisor.

This package provides the effective configuration through the config module,
plus the manifest loader, identity generator, supervisor, router and console.
"""

from .config import effective_settings

__all__ = ["effective_settings"]
