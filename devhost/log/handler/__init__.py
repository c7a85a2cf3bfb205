"""
Logging handlers for the supervisor.
This module provides the optional handler that ships logs to Grafana Loki.
"""

from .loki import LokiHandler

__all__ = ["LokiHandler"]
