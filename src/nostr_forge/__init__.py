"""
Nostr Forge - signed event construction for the Nostr protocol

Builds, canonically serializes, content-addresses, optionally
proof-of-work hardens, signs and delegates Nostr events.

Key Features:
- Canonical NIP-01 serialization and SHA-256 event ids
- BIP-340 Schnorr signatures over secp256k1
- NIP-13 proof of work with bounded, restartable nonce search
- NIP-26 delegation tags, issued and verified
- Payload builders for notes, metadata, contacts, reactions, polls and calendars

Usage:
    from nostr_forge import EventEngine, KeyPair

    engine = EventEngine(KeyPair.generate())
    frame = engine.build_note_event("Hello, Nostr!")
"""

__version__ = "0.1.0"
__author__ = "Nostr Forge Contributors"
__license__ = "AGPLv3"

from .core import (
    DelegationTag,
    EngineConfig,
    EventKinds,
    EventPayload,
    KeyManager,
    KeyPair,
    SignedEvent,
    UnsignedEvent,
    compute_event_id,
    issue_delegation,
    mine,
    verify_delegation,
    verify_event,
)
from .core.exceptions import (
    MissingKeyError,
    NostrForgeError,
    PayloadError,
    PowTargetNotReached,
    ValidationError,
)
from .client.engine import EventEngine

__all__ = [
    'DelegationTag',
    'EngineConfig',
    'EventEngine',
    'EventKinds',
    'EventPayload',
    'KeyManager',
    'KeyPair',
    'MissingKeyError',
    'NostrForgeError',
    'PayloadError',
    'PowTargetNotReached',
    'SignedEvent',
    'UnsignedEvent',
    'ValidationError',
    'compute_event_id',
    'issue_delegation',
    'mine',
    'verify_delegation',
    'verify_event',
]
