"""
The Supervisor package.
Manages the lifecycle of the module process under development.

This package contains the central ModuleHost class and its helper modules,
which together handle launching the module, its message channel, and
stopping it again.
"""
from .supervisor import ModuleHost
from .errors import ChannelError, LaunchError

__all__ = ['ModuleHost', 'ChannelError', 'LaunchError']
