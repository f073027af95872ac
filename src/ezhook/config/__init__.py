"""
Package: config
Description: Configuration for the ezhook delivery client.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
