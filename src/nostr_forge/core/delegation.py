"""
Delegated event signing (NIP-26)

A delegator signs the string "nostr:delegation:<delegatee>:<conditions>"
and hands the resulting tag to the delegatee, who attaches it to the
events it publishes. Anyone holding the tag and the delegatee's pubkey can
re-verify it.
"""

from typing import List, Optional, Sequence, Union
import hashlib

from pydantic import BaseModel, ConfigDict, Field

from .crypto import KeyPair, verify_signature
from .events import UnsignedEvent

DELEGATION_TAG = "delegation"
DELEGATION_PREFIX = "nostr:delegation:"


class DelegationTag(BaseModel):
    """["delegation", delegator pubkey, conditions, signature]"""

    model_config = ConfigDict(frozen=True)

    delegator: str = Field(..., description="Delegator x-only public key, hex")
    conditions: str = Field(..., description="Query-string style conditions")
    signature: str = Field(..., description="Schnorr signature, hex")

    def as_tag(self) -> List[str]:
        return [DELEGATION_TAG, self.delegator, self.conditions, self.signature]

    @classmethod
    def from_tag(cls, tag: Sequence[str]) -> 'DelegationTag':
        if len(tag) != 4 or tag[0] != DELEGATION_TAG:
            raise ValueError("A delegation tag has exactly 4 elements and starts with 'delegation'")
        return cls(delegator=tag[1], conditions=tag[2], signature=tag[3])


def delegation_token(delegatee_pubkey: str, conditions: str) -> str:
    """SHA-256 (hex) of the delegation message string"""
    message = f"{DELEGATION_PREFIX}{delegatee_pubkey}:{conditions}"
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def issue_delegation(delegator: KeyPair, delegatee_pubkey: str, conditions: str) -> DelegationTag:
    """Sign a delegation of authorship to delegatee_pubkey under conditions"""
    token = delegation_token(delegatee_pubkey, conditions)
    signature = delegator.sign(bytes.fromhex(token))
    return DelegationTag(delegator=delegator.public_key_hex, conditions=conditions, signature=signature)


def verify_delegation(delegatee_pubkey: str, tag: Union[DelegationTag, Sequence[str]]) -> bool:
    """
    Check a delegation tag's signature for a given delegatee

    Never raises: a malformed or forged tag verifies as False.
    """
    if not isinstance(tag, DelegationTag):
        try:
            tag = DelegationTag.from_tag(list(tag))
        except (ValueError, TypeError):
            return False
    token = delegation_token(delegatee_pubkey, tag.conditions)
    return verify_signature(token, tag.delegator, tag.signature)


def build_conditions(
    kinds: Optional[Sequence[int]] = None,
    created_after: Optional[int] = None,
    created_before: Optional[int] = None,
) -> str:
    """Compose a conditions string, e.g. "kind=1&created_at>1700000000" """
    clauses = [f"kind={k}" for k in (kinds or [])]
    if created_after is not None:
        clauses.append(f"created_at>{created_after}")
    if created_before is not None:
        clauses.append(f"created_at<{created_before}")
    return "&".join(clauses)


def check_conditions(conditions: str, event: UnsignedEvent) -> bool:
    """
    Whether an event falls within a delegation's conditions

    Several kind= clauses allow any of those kinds; created_at bounds are
    strict. Unknown clauses fail the check.
    """
    kinds = set()
    for clause in filter(None, conditions.split("&")):
        try:
            if clause.startswith("kind="):
                kinds.add(int(clause[len("kind="):]))
            elif clause.startswith("created_at>"):
                if not event.created_at > int(clause[len("created_at>"):]):
                    return False
            elif clause.startswith("created_at<"):
                if not event.created_at < int(clause[len("created_at<"):]):
                    return False
            else:
                return False
        except ValueError:
            return False
    return not kinds or event.kind in kinds
