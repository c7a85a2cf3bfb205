"""
This module initializes the console package, exposing the relay that forwards
operator-typed JSON messages to the module.
"""

from .relay import ConsoleRelay

__all__ = ["ConsoleRelay"]
