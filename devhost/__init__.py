"""
DevHost: a development-time supervisor for plugin modules.

It launches a module as a child process, gives it a private JSON message
channel and the minimal runtime context it expects, and lets the operator
inject messages from the terminal.
"""

__version__ = "0.1.0"
