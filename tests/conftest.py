from __future__ import annotations

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from nostr_forge.client.engine import EventEngine
from nostr_forge.core.crypto import KeyPair

# BIP-340 test vector 0
VECTOR_SECRET = "0000000000000000000000000000000000000000000000000000000000000003"
VECTOR_PUBKEY = "f9308a019258c31049344f85f89d5229b531c845836f99b08601f113bce036f9"


class MemoryKeyring(KeyringBackend):
    """Keyring backend that keeps passwords in a dict."""

    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("No such password") from None


@pytest.fixture()
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture()
def keypair() -> KeyPair:
    return KeyPair(VECTOR_SECRET)


@pytest.fixture()
def other_keypair() -> KeyPair:
    return KeyPair.generate()


@pytest.fixture()
def engine(keypair: KeyPair) -> EventEngine:
    return EventEngine(keypair)


@pytest.fixture()
def unsigned(keypair: KeyPair) -> dict:
    return {
        "pubkey": keypair.public_key_hex,
        "created_at": 1700000000,
        "kind": 1,
        "tags": [["p", "a" * 64], ["t", "nostr"]],
        "content": "hello",
    }
