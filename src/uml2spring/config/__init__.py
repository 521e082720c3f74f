"""Configuration module for uml2spring."""

from .settings import Settings, get_settings, is_java_package
from .logging import setup_logging, get_logger

__all__ = ["Settings", "get_settings", "is_java_package", "setup_logging", "get_logger"]
