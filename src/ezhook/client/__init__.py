"""
Package: client
Description: High-level webhook client built on the delivery engine.
"""

from .webhook import Webhook

__all__ = ["Webhook"]
