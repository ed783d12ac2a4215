"""
Event engine

Turns unsigned payloads into signed events: attach the delegation tag (if
any), validate, mine proof of work (if configured), address and sign.
Engines are immutable: delegation and difficulty variants are new engines
or per-call arguments.
"""

from typing import Optional, List, Dict, Any, Mapping, Sequence, Union
from datetime import datetime, timezone
import logging

from ..core.config import EngineConfig
from ..core.crypto import KeyPair, compute_event_id, sign_event
from ..core.delegation import DelegationTag, check_conditions
from ..core.events import EventPayload, SignedEvent, UnsignedEvent, validate_event
from ..core.exceptions import MissingKeyError, ValidationError
from ..core.frames import wrap_event
from ..core.pow import MAX_POW_TARGET, mine
from ..nips.calendar import (
    CalendarAudience,
    CalendarLocation,
    DateCalendarOptions,
    TimeCalendarOptions,
    date_calendar_payload,
    time_calendar_payload,
)
from ..nips.payloads import (
    MetadataOptions,
    contact_list_payload,
    deletion_payload,
    metadata_payload,
    note_payload,
    reaction_payload,
    recommended_relay_payload,
)
from ..nips.poll import PollOptions, poll_payload

logger = logging.getLogger(__name__)

Payload = Union[EventPayload, UnsignedEvent, Mapping[str, Any]]


class EventEngine:
    """Builds signed events for one keypair"""

    def __init__(
        self,
        keypair: KeyPair,
        config: Optional[EngineConfig] = None,
        delegation: Optional[DelegationTag] = None,
    ):
        self.keypair = keypair
        self.config = config or EngineConfig()
        self.delegation = delegation

    @classmethod
    def from_keys(
        cls,
        private_key: Optional[str] = None,
        public_key: Optional[str] = None,
        config: Optional[EngineConfig] = None,
    ) -> 'EventEngine':
        """Create an engine from hex keys; a public key alone gives a verify-only engine"""
        return cls(KeyPair(private_key, public_key), config)

    @property
    def public_key(self) -> str:
        return self.keypair.public_key_hex

    def with_delegation(self, tag: DelegationTag) -> 'EventEngine':
        """Engine that attaches tag to every event it builds"""
        return EventEngine(self.keypair, self.config, tag)

    def without_delegation(self) -> 'EventEngine':
        return EventEngine(self.keypair, self.config, None)

    def with_pow_target(self, target: Optional[int]) -> 'EventEngine':
        """Engine mining every event to target (None disables mining)"""
        if target is not None and not 0 <= target <= MAX_POW_TARGET:
            raise ValueError(f"pow_target must be in [0, {MAX_POW_TARGET}]")
        config = self.config.model_copy(update={"pow_target": target})
        return EventEngine(self.keypair, config, self.delegation)

    def build(self, payload: Payload, delegation: Optional[DelegationTag] = None) -> SignedEvent:
        """
        Build a signed event

        delegation overrides the engine's own delegation tag for this call.
        An event outside the delegation's conditions is logged, or rejected
        with ValidationError when enforce_delegation_conditions is set.
        Raises ValidationError for a malformed payload, MissingKeyError on a
        verify-only engine and PowTargetNotReached when a bounded search
        gives up. Nothing is returned on failure.
        """
        delegation = delegation or self.delegation
        data = self._event_fields(payload)
        if delegation is not None:
            data["tags"] = self._append_tag(data.get("tags"), delegation.as_tag())

        event = validate_event(data)
        if event.pubkey != self.public_key:
            raise ValidationError("pubkey", "must be the engine's public key")
        if delegation is not None and not check_conditions(delegation.conditions, event):
            if self.config.enforce_delegation_conditions:
                raise ValidationError("tags", "event is outside the delegation's conditions")
            logger.warning(
                "Kind %d event at %d is outside delegation conditions %r",
                event.kind, event.created_at, delegation.conditions,
            )
        if not self.keypair.can_sign:
            raise MissingKeyError("This engine is verify-only; signing requires a private key")

        if self.config.pow_target is not None:
            event, event_id = mine(
                event,
                self.config.pow_target,
                max_attempts=self.config.pow_max_attempts,
                deadline=self.config.pow_deadline_seconds,
                mode=self.config.pow_mode,
            )
        else:
            event_id = compute_event_id(event)

        signed = sign_event(event, self.keypair, event_id=event_id)
        logger.info("Built kind %d event %s", signed.kind, signed.id)
        return signed

    def build_event(self, payload: Payload, delegation: Optional[DelegationTag] = None) -> List[Any]:
        """Build a signed event and wrap it in an EVENT frame"""
        return wrap_event(self.build(payload, delegation))

    def _event_fields(self, payload: Payload) -> Dict[str, Any]:
        if isinstance(payload, EventPayload):
            return {
                "pubkey": self.public_key,
                "created_at": payload.created_at if payload.created_at is not None else now(),
                "kind": payload.kind,
                "tags": [list(t) for t in payload.tags],
                "content": payload.content,
            }
        if isinstance(payload, UnsignedEvent):
            return payload.model_dump()
        if isinstance(payload, Mapping):
            data = dict(payload)
            data.setdefault("pubkey", self.public_key)
            data.setdefault("created_at", now())
            return data
        raise ValidationError("event", "must be an EventPayload, UnsignedEvent or mapping")

    @staticmethod
    def _append_tag(tags: Any, tag: List[str]) -> Any:
        if tags is None:
            return [tag]
        if not isinstance(tags, (list, tuple)):
            # Left as-is for the validator to reject
            return tags
        return [list(t) if isinstance(t, (list, tuple)) else t for t in tags] + [tag]

    # Payload builders, each returning an EVENT frame

    def build_metadata_event(self, metadata: Optional[MetadataOptions] = None) -> List[Any]:
        return self.build_event(metadata_payload(metadata or MetadataOptions()))

    def build_note_event(self, text: str, channel_id: Optional[str] = None) -> List[Any]:
        return self.build_event(note_payload(text, channel_id))

    def build_recommended_relay_event(self, relay: str) -> List[Any]:
        return self.build_event(recommended_relay_payload(relay))

    def build_contact_list_event(self, contacts: Sequence[Sequence[str]]) -> List[Any]:
        return self.build_event(contact_list_payload(contacts))

    def build_deletion_event(self, event_ids: Sequence[str], reason: str = "") -> List[Any]:
        return self.build_event(deletion_payload(event_ids, reason))

    def build_reaction_event(self, reaction: str, event_id: str, author: str) -> List[Any]:
        return self.build_event(reaction_payload(reaction, event_id, author))

    def build_poll_event(self, content: str, poll_options: List[str], options: Optional[PollOptions] = None) -> List[Any]:
        return self.build_event(poll_payload(content, poll_options, options))

    def build_time_calendar_event(
        self,
        name: str,
        content: str,
        timestamps: TimeCalendarOptions,
        location: Optional[CalendarLocation] = None,
        audience: Optional[CalendarAudience] = None,
    ) -> List[Any]:
        return self.build_event(time_calendar_payload(name, content, timestamps, location, audience))

    def build_date_calendar_event(
        self,
        name: str,
        content: str,
        dates: DateCalendarOptions,
        location: Optional[CalendarLocation] = None,
        audience: Optional[CalendarAudience] = None,
    ) -> List[Any]:
        return self.build_event(date_calendar_payload(name, content, dates, location, audience))


def now() -> int:
    """Current UTC time in unix seconds"""
    return int(datetime.now(timezone.utc).timestamp())
