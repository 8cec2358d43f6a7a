"""Configuration package re-exports."""

from tracker_server.config.loader import ConfigLoader
from tracker_server.config.settings import ConfigurationError, Settings

__all__ = ["ConfigLoader", "ConfigurationError", "Settings"]
