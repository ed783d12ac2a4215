"""
Event Schema and Validation for the Nostr wire protocol

This module defines the unsigned and signed event structures and the
field-shape checks every event passes before it is addressed and signed.
"""

from typing import Optional, Dict, Any, List, Mapping, Union, Annotated
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError
import json

from .exceptions import ValidationError


HexPubkey = Annotated[str, Field(strict=True, pattern=r"^[0-9a-f]{64}$")]
EventKind = Annotated[int, Field(strict=True, ge=0, le=31999)]
Tag = List[StrictStr]


class EventKinds:
    """Event kinds produced by the payload builders"""

    METADATA = 0
    TEXT_NOTE = 1
    RECOMMEND_RELAY = 2
    CONTACTS = 3
    ENCRYPTED_DM = 4
    DELETION = 5
    REACTION = 7
    CHANNEL_MESSAGE = 42
    POLL = 6969
    DATE_CALENDAR = 31922
    TIME_CALENDAR = 31923

    MIN_KIND = 0
    MAX_KIND = 31999


# Reported constraint per field, in validation order
FIELD_CONSTRAINTS = {
    "pubkey": "must be 64 lowercase hex characters",
    "created_at": "must be an integer (unix seconds)",
    "kind": f"must be an integer in [{EventKinds.MIN_KIND}, {EventKinds.MAX_KIND}]",
    "tags": "must be a sequence of sequences of UTF-8 encodable strings",
    "content": "must be a UTF-8 encodable string",
}


def _check_utf8(text: str) -> str:
    # Lone surrogates pass str checks but cannot be serialized canonically
    text.encode("utf-8")
    return text


class UnsignedEvent(BaseModel):
    """
    Addressable fields of an event

    Field order is the validation order: the first violated field is the
    one reported.
    """

    model_config = ConfigDict(frozen=True)

    pubkey: HexPubkey = Field(..., description="Author x-only public key, hex")
    created_at: StrictInt = Field(..., description="Unix timestamp in seconds")
    kind: EventKind = Field(..., description="Event kind")
    tags: List[Tag] = Field(..., description="Ordered tag sequence")
    content: StrictStr = Field(..., description="Event content")

    @field_validator("tags")
    @classmethod
    def tags_are_utf8(cls, v: List[List[str]]) -> List[List[str]]:
        for tag in v:
            for item in tag:
                _check_utf8(item)
        return v

    @field_validator("content")
    @classmethod
    def content_is_utf8(cls, v: str) -> str:
        return _check_utf8(v)

    def canonical_fields(self) -> List[Any]:
        """Fields in the order they appear in the canonical form"""
        return [self.pubkey, self.created_at, self.kind, self.tags, self.content]

    def with_tags(self, tags: List[List[str]]) -> 'UnsignedEvent':
        return self.model_copy(update={"tags": [list(t) for t in tags]})


class SignedEvent(UnsignedEvent):
    """An addressed and signed event. Any field change invalidates id and sig."""

    id: Annotated[str, Field(strict=True, pattern=r"^[0-9a-f]{64}$")]
    sig: Annotated[str, Field(strict=True, pattern=r"^[0-9a-f]{128}$")]

    def unsigned(self) -> UnsignedEvent:
        return UnsignedEvent(
            pubkey=self.pubkey,
            created_at=self.created_at,
            kind=self.kind,
            tags=self.tags,
            content=self.content,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to its wire dictionary"""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(t) for t in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SignedEvent':
        """Create event from a wire dictionary"""
        return cls.model_validate(dict(data))

    @classmethod
    def from_json(cls, text: str) -> 'SignedEvent':
        return cls.from_dict(json.loads(text))

    def get_tags(self, name: str) -> List[List[str]]:
        """All tags whose discriminator equals name"""
        return [t for t in self.tags if t and t[0] == name]


class EventPayload(BaseModel):
    """Unsigned (kind, tags, content) triple produced by a payload builder"""

    kind: int
    tags: List[List[str]] = Field(default_factory=list)
    content: str = ""
    created_at: Optional[int] = None


def validate_event(payload: Union[UnsignedEvent, Mapping[str, Any]]) -> UnsignedEvent:
    """
    Check every field of an unsigned event

    Fails fast on the first violated field (pubkey, created_at, kind, tags,
    content) and raises ValidationError naming it. No side effects.
    """
    if isinstance(payload, UnsignedEvent):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("event", "must be a mapping of event fields")

    data = {name: payload[name] for name in FIELD_CONSTRAINTS if name in payload}
    try:
        return UnsignedEvent.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else "event"
        raise ValidationError(field, FIELD_CONSTRAINTS.get(field, first["msg"])) from None


def is_valid_event(payload: Mapping[str, Any]) -> bool:
    """Validate an event dictionary against the schema"""
    try:
        validate_event(payload)
        return True
    except ValidationError:
        return False
