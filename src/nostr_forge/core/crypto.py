"""
Cryptographic operations for the Nostr wire protocol

This module provides secp256k1 x-only keys, BIP-340 Schnorr signatures,
the canonical event serialization and the SHA-256 content address
(event id) computed from it.
"""

from typing import Optional, Dict
import json
import hashlib
import logging
import re
from datetime import datetime

import coincurve
import keyring
from keyring.errors import KeyringError

from .events import UnsignedEvent, SignedEvent
from .exceptions import MissingKeyError, ValidationError

logger = logging.getLogger(__name__)

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


class KeyPair:
    """
    secp256k1 key pair for signing events

    Holding only a public key puts the pair in verify-only mode: every
    signing operation raises MissingKeyError.
    """

    def __init__(self, private_key_hex: Optional[str] = None, public_key_hex: Optional[str] = None):
        if private_key_hex is not None:
            if not isinstance(private_key_hex, str):
                raise ValidationError("private_key", "must be 64 hex characters")
            private_key_hex = private_key_hex.lower()
            if not _HEX64.match(private_key_hex):
                raise ValidationError("private_key", "must be 64 hex characters")
            try:
                self._private_key = coincurve.PrivateKey(bytes.fromhex(private_key_hex))
            except ValueError as e:
                raise ValidationError("private_key", "is not a valid secp256k1 scalar") from e
            self.private_key_hex = private_key_hex
            self.public_key_hex = derive_public_key(self._private_key)
            if public_key_hex is not None and not isinstance(public_key_hex, str):
                raise ValidationError("public_key", "must be 64 hex characters")
            if public_key_hex is not None and public_key_hex.lower() != self.public_key_hex:
                raise ValidationError("public_key", "does not match the private key")
        elif public_key_hex is not None:
            if not isinstance(public_key_hex, str):
                raise ValidationError("public_key", "must be 64 hex characters")
            public_key_hex = public_key_hex.lower()
            if not _HEX64.match(public_key_hex):
                raise ValidationError("public_key", "must be 64 hex characters")
            self._private_key = None
            self.private_key_hex = None
            self.public_key_hex = public_key_hex
        else:
            raise MissingKeyError("Missing private or public key")

    @classmethod
    def generate(cls) -> 'KeyPair':
        """Create a keypair from a fresh random scalar"""
        return cls(coincurve.PrivateKey().secret.hex())

    @property
    def can_sign(self) -> bool:
        return self._private_key is not None

    def sign(self, digest: bytes) -> str:
        """Schnorr-sign a 32-byte digest and return the hex signature"""
        if self._private_key is None:
            raise MissingKeyError("Signing requires a private key; this keypair is verify-only")
        return self._private_key.sign_schnorr(digest).hex()

    def verify(self, digest: bytes, signature_hex: str) -> bool:
        """Verify signature against digest using this keypair's public key"""
        return verify_signature(digest.hex(), self.public_key_hex, signature_hex)

    def keys(self) -> Dict[str, str]:
        keys = {"public_key": self.public_key_hex}
        if self.private_key_hex:
            keys["private_key"] = self.private_key_hex
        return keys

    def to_dict(self) -> Dict[str, str]:
        """Export keypair as dictionary"""
        data = self.keys()
        data["created_at"] = datetime.now().isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'KeyPair':
        """Import keypair from dictionary"""
        return cls(data.get("private_key"), data.get("public_key"))

    def __repr__(self) -> str:
        mode = "signing" if self.can_sign else "verify-only"
        return f"KeyPair({self.public_key_hex[:16]}..., {mode})"


def derive_public_key(private_key: coincurve.PrivateKey) -> str:
    """x-only public key (hex) for a private scalar"""
    return private_key.public_key.format(compressed=True)[1:].hex()


def verify_signature(digest_hex: str, public_key_hex: str, signature_hex: str) -> bool:
    """
    Verify a BIP-340 signature over a 32-byte digest

    Malformed inputs (bad hex, wrong lengths, a key that is not a curve
    point) verify as False.
    """
    try:
        digest = bytes.fromhex(digest_hex)
        signature = bytes.fromhex(signature_hex)
        if len(digest) != 32 or len(signature) != 64:
            return False
        public_key = coincurve.PublicKeyXOnly(bytes.fromhex(public_key_hex))
        return bool(public_key.verify(signature, digest))
    except (ValueError, TypeError):
        return False


def serialize_event(event: UnsignedEvent) -> bytes:
    """
    Canonical serialization of an event's addressable fields

    The form is the array [0, pubkey, created_at, kind, tags, content] as
    whitespace-free JSON, UTF-8 encoded, non-ASCII characters unescaped.
    """
    canonical = [0] + event.canonical_fields()
    return json.dumps(canonical, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def digest(serialized: bytes) -> str:
    """SHA-256 of canonical bytes as 64 lowercase hex characters"""
    return hashlib.sha256(serialized).hexdigest()


def compute_event_id(event: UnsignedEvent) -> str:
    return digest(serialize_event(event))


def sign_id(event_id: str, keypair: KeyPair) -> str:
    """Sign an event id (the raw digest bytes, not its hex text)"""
    return keypair.sign(bytes.fromhex(event_id))


def sign_event(event: UnsignedEvent, keypair: KeyPair, event_id: Optional[str] = None) -> SignedEvent:
    """
    Address and sign an event

    event_id may be supplied when it was already computed (for example by
    the proof-of-work miner); it must be the id of event as given.
    """
    if event_id is None:
        event_id = compute_event_id(event)
    signature = sign_id(event_id, keypair)
    return SignedEvent(id=event_id, sig=signature, **event.model_dump())


def verify_event(event: SignedEvent) -> bool:
    """
    Verify a signed event

    Recomputes the id from the addressable fields and checks the signature
    against the event's pubkey.
    """
    if compute_event_id(event.unsigned()) != event.id:
        return False
    return verify_signature(event.id, event.pubkey, event.sig)


class KeyManager:
    """Manages a user's private key in the OS keyring"""

    def __init__(self, profile: str):
        self.profile = profile
        self.service_name = "nostr-forge"
        self.key_name = f"keypair_{profile}"

    def save_keypair(self, keypair: KeyPair) -> bool:
        """Save keypair to secure storage"""
        if not keypair.can_sign:
            raise MissingKeyError("Only keypairs holding a private key can be saved")
        try:
            keyring.set_password(self.service_name, self.key_name, json.dumps(keypair.to_dict()))
            return True
        except KeyringError as e:
            logger.error("Error saving keypair for %s: %s", self.profile, e)
            return False

    def load_keypair(self) -> Optional[KeyPair]:
        """Load keypair from secure storage"""
        keypair_json = keyring.get_password(self.service_name, self.key_name)
        if not keypair_json:
            return None
        return KeyPair.from_dict(json.loads(keypair_json))

    def generate_and_save_keypair(self) -> KeyPair:
        """Generate new keypair and save it"""
        keypair = KeyPair.generate()
        self.save_keypair(keypair)
        logger.info("Generated keypair %s for profile %s", keypair.public_key_hex, self.profile)
        return keypair

    def get_or_create_keypair(self) -> KeyPair:
        """Get existing keypair or create new one"""
        keypair = self.load_keypair()
        if keypair is None:
            keypair = self.generate_and_save_keypair()
        return keypair

    def delete_keypair(self) -> bool:
        """Delete keypair from secure storage"""
        try:
            keyring.delete_password(self.service_name, self.key_name)
            return True
        except KeyringError as e:
            logger.error("Error deleting keypair for %s: %s", self.profile, e)
            return False
