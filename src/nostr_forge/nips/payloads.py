"""
Payload builders for the basic event kinds (NIP-01, NIP-02, NIP-09, NIP-24, NIP-25, NIP-28)

Each builder returns an EventPayload; pubkey, created_at, id and sig are
filled in by the engine.
"""

from typing import Optional, Sequence
import re

from pydantic import BaseModel, Field

from ..core.events import EventKinds, EventPayload
from ..core.exceptions import PayloadError

_HEX64 = re.compile(r"^[0-9a-f]{64}$")


class MetadataOptions(BaseModel):
    """Profile metadata (kind 0); unset fields are left out of the content"""

    name: Optional[str] = None
    display_name: Optional[str] = None
    about: Optional[str] = Field(None, description="Profile description")
    picture: Optional[str] = Field(None, description="Profile picture URL")
    banner: Optional[str] = Field(None, description="Profile banner URL")
    nip05: Optional[str] = Field(None, description="NIP-05 verification address")
    lud16: Optional[str] = Field(None, description="Lightning address")
    website: Optional[str] = None


def metadata_payload(metadata: MetadataOptions) -> EventPayload:
    return EventPayload(
        kind=EventKinds.METADATA,
        content=metadata.model_dump_json(exclude_none=True),
    )


def note_payload(text: str, channel_id: Optional[str] = None) -> EventPayload:
    """A text note, or a channel message when channel_id is given"""
    if channel_id:
        return EventPayload(kind=EventKinds.CHANNEL_MESSAGE, tags=[["e", channel_id]], content=text)
    return EventPayload(kind=EventKinds.TEXT_NOTE, content=text)


def recommended_relay_payload(relay: str) -> EventPayload:
    if not relay.startswith(("wss://", "ws://")):
        raise PayloadError(f"Invalid relay URL: {relay}")
    return EventPayload(kind=EventKinds.RECOMMEND_RELAY, content=relay)


def contact_list_payload(contacts: Sequence[Sequence[str]]) -> EventPayload:
    """
    Contact list (NIP-02)

    Each contact is [pubkey] optionally followed by a relay URL and a
    petname.
    """
    tags = []
    for contact in contacts:
        if isinstance(contact, str) or not contact:
            raise PayloadError("Each contact must be a non-empty sequence starting with a pubkey")
        tags.append(["p", *contact])
    return EventPayload(kind=EventKinds.CONTACTS, tags=tags, content="")


def deletion_payload(event_ids: Sequence[str], reason: str = "") -> EventPayload:
    return EventPayload(
        kind=EventKinds.DELETION,
        tags=[["e", event_id] for event_id in event_ids],
        content=reason,
    )


def reaction_payload(reaction: str, event_id: str, author: str) -> EventPayload:
    """
    Reaction (NIP-25)

    reaction is "+", "-" or an emoji. Emoji-set membership is not checked
    here; any non-ASCII text is accepted.
    """
    if not reaction or (reaction not in ("+", "-") and reaction.isascii()):
        raise PayloadError(f"Invalid reaction: {reaction!r}")
    if not isinstance(event_id, str) or not _HEX64.match(event_id):
        raise PayloadError("Invalid event: expected a 64 character hex id")
    if not isinstance(author, str) or not _HEX64.match(author):
        raise PayloadError("Invalid author: expected a 64 character hex pubkey")
    return EventPayload(
        kind=EventKinds.REACTION,
        tags=[["e", event_id], ["p", author]],
        content=reaction,
    )
