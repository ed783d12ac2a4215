"""
Nostr Forge Client Module

The event engine that turns payloads into signed events and wire frames.
"""

from .engine import EventEngine

__all__ = ['EventEngine']
