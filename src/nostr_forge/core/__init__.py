"""
Nostr Forge Core Module

This module contains the protocol core:
- Event schema and field validation
- Canonical serialization, event ids and Schnorr signatures
- Proof-of-work mining
- Delegation tags
- Wire frames
"""

from .config import EngineConfig
from .crypto import KeyPair, KeyManager, compute_event_id, serialize_event, sign_event, verify_event
from .delegation import DelegationTag, issue_delegation, verify_delegation
from .events import EventKinds, EventPayload, SignedEvent, UnsignedEvent, validate_event
from .pow import mine

__all__ = [
    'DelegationTag',
    'EngineConfig',
    'EventKinds',
    'EventPayload',
    'KeyPair',
    'KeyManager',
    'SignedEvent',
    'UnsignedEvent',
    'compute_event_id',
    'issue_delegation',
    'mine',
    'serialize_event',
    'sign_event',
    'validate_event',
    'verify_delegation',
    'verify_event',
]
