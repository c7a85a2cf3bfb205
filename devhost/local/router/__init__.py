"""
The message router package.

Parses inbound module messages, dispatches them by type and answers
configuration requests with a synthetic configuration.
"""
from .router import MessageRouter
from .config_responder import build_synthetic_config, parse_credentials

__all__ = ["MessageRouter", "build_synthetic_config", "parse_credentials"]
