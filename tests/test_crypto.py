"""Keys, canonical serialization, event ids and Schnorr signatures."""

import hashlib
import json

import pytest

from nostr_forge.core.crypto import (
    KeyManager,
    KeyPair,
    compute_event_id,
    serialize_event,
    sign_event,
    verify_event,
    verify_signature,
)
from nostr_forge.core.events import UnsignedEvent
from nostr_forge.core.exceptions import MissingKeyError, ValidationError

from .conftest import VECTOR_PUBKEY, VECTOR_SECRET

VECTOR_MESSAGE = "00" * 32
VECTOR_SIGNATURE = (
    "e907831f80848d1069a5371b402410364bdf1c5f8307b0084c55f1ce2dca8215"
    "25f66a4a85ea8b71e482a74f382d2ce5ebeee8fdb2172f477df4900d310536c0"
)


def _flip_last(hex_text: str) -> str:
    return hex_text[:-1] + ("0" if hex_text[-1] != "0" else "1")


def test_public_key_derivation_matches_bip340_vector() -> None:
    assert KeyPair(VECTOR_SECRET).public_key_hex == VECTOR_PUBKEY


def test_verifies_bip340_vector() -> None:
    assert verify_signature(VECTOR_MESSAGE, VECTOR_PUBKEY, VECTOR_SIGNATURE)
    assert not verify_signature(VECTOR_MESSAGE, VECTOR_PUBKEY, _flip_last(VECTOR_SIGNATURE))


def test_keypair_requires_a_key() -> None:
    with pytest.raises(MissingKeyError):
        KeyPair()


def test_mismatched_public_key_is_rejected() -> None:
    with pytest.raises(ValidationError):
        KeyPair(VECTOR_SECRET, "1" * 64)


def test_invalid_private_key_is_rejected() -> None:
    with pytest.raises(ValidationError):
        KeyPair("zz" * 32)
    with pytest.raises(ValidationError):
        KeyPair("00" * 32)


def test_verify_only_keypair_cannot_sign() -> None:
    verify_only = KeyPair(public_key_hex=VECTOR_PUBKEY)
    assert not verify_only.can_sign
    assert verify_only.keys() == {"public_key": VECTOR_PUBKEY}
    with pytest.raises(MissingKeyError):
        verify_only.sign(bytes(32))


def test_canonical_serialization(unsigned: dict) -> None:
    event = UnsignedEvent(**unsigned)
    expected = '[0,"%s",1700000000,1,[["p","%s"],["t","nostr"]],"hello"]' % (unsigned["pubkey"], "a" * 64)
    assert serialize_event(event) == expected.encode("utf-8")
    assert compute_event_id(event) == hashlib.sha256(expected.encode("utf-8")).hexdigest()


def test_serialization_keeps_unicode_and_escapes_controls(unsigned: dict) -> None:
    unsigned["content"] = 'café "quoted"\nline'
    serialized = serialize_event(UnsignedEvent(**unsigned))
    assert 'café \\"quoted\\"\\nline'.encode("utf-8") in serialized
    assert b" " not in serialized.replace("café ".encode("utf-8"), b"")


def test_id_is_deterministic(unsigned: dict) -> None:
    ids = {compute_event_id(UnsignedEvent(**unsigned)) for _ in range(5)}
    assert len(ids) == 1
    (event_id,) = ids
    assert len(event_id) == 64 and event_id == event_id.lower()


@pytest.mark.parametrize(
    "field,value",
    [
        ("pubkey", "b" * 64),
        ("created_at", 1700000001),
        ("kind", 2),
        ("tags", [["p", "a" * 64], ["t", "nostr"], ["t", "more"]]),
        ("content", "hello!"),
    ],
)
def test_id_changes_with_any_field(unsigned: dict, field: str, value) -> None:
    original = compute_event_id(UnsignedEvent(**unsigned))
    unsigned[field] = value
    assert compute_event_id(UnsignedEvent(**unsigned)) != original


def test_id_changes_when_tags_are_reordered(unsigned: dict) -> None:
    original = compute_event_id(UnsignedEvent(**unsigned))
    unsigned["tags"] = list(reversed(unsigned["tags"]))
    assert compute_event_id(UnsignedEvent(**unsigned)) != original


def test_sign_verify_round_trip(keypair: KeyPair, other_keypair: KeyPair, unsigned: dict) -> None:
    signed = sign_event(UnsignedEvent(**unsigned), keypair)
    assert signed.id == compute_event_id(UnsignedEvent(**unsigned))
    assert len(signed.sig) == 128
    assert verify_event(signed)
    assert verify_signature(signed.id, signed.pubkey, signed.sig)
    assert keypair.verify(bytes.fromhex(signed.id), signed.sig)

    assert not verify_signature(signed.id, signed.pubkey, _flip_last(signed.sig))
    assert not verify_signature(signed.id, other_keypair.public_key_hex, signed.sig)


def test_tampered_event_fails_verification(keypair: KeyPair, unsigned: dict) -> None:
    signed = sign_event(UnsignedEvent(**unsigned), keypair)
    tampered = signed.model_copy(update={"content": "goodbye"})
    assert not verify_event(tampered)


@pytest.mark.parametrize(
    "digest,pubkey,sig",
    [
        ("00" * 31, VECTOR_PUBKEY, VECTOR_SIGNATURE),
        (VECTOR_MESSAGE, VECTOR_PUBKEY, VECTOR_SIGNATURE[:-2]),
        (VECTOR_MESSAGE, "zz" * 32, VECTOR_SIGNATURE),
        (VECTOR_MESSAGE, VECTOR_PUBKEY, "not hex"),
    ],
)
def test_malformed_inputs_do_not_verify(digest: str, pubkey: str, sig: str) -> None:
    assert not verify_signature(digest, pubkey, sig)


def test_key_manager_round_trip(memory_keyring) -> None:
    manager = KeyManager("alice")
    assert manager.load_keypair() is None

    created = manager.get_or_create_keypair()
    stored = json.loads(memory_keyring.passwords[("nostr-forge", "keypair_alice")])
    assert stored["private_key"] == created.private_key_hex

    loaded = manager.get_or_create_keypair()
    assert loaded.public_key_hex == created.public_key_hex
    assert loaded.private_key_hex == created.private_key_hex

    assert manager.delete_keypair()
    assert manager.load_keypair() is None
    assert not manager.delete_keypair()


def test_key_manager_refuses_verify_only_keys(memory_keyring) -> None:
    with pytest.raises(MissingKeyError):
        KeyManager("bob").save_keypair(KeyPair(public_key_hex=VECTOR_PUBKEY))


@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"private_key_hex": 12345}, "private_key"),
        ({"private_key_hex": b"\x00" * 32}, "private_key"),
        ({"public_key_hex": 12345}, "public_key"),
        ({"private_key_hex": VECTOR_SECRET, "public_key_hex": 12345}, "public_key"),
    ],
)
def test_non_string_keys_are_rejected(kwargs: dict, field: str) -> None:
    with pytest.raises(ValidationError) as exc:
        KeyPair(**kwargs)
    assert exc.value.field == field
