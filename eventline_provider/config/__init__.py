"""Configuration module for the Eventline provider."""
from .settings import EventlineSettings, build_client, load_settings
from .logging import configure_logging

__all__ = ["EventlineSettings", "build_client", "load_settings", "configure_logging"]
