"""
Client-to-relay wire frames

Each frame is a fixed-shape list handed to a transport as JSON.
"""

from typing import Any, Dict, List, Optional
import json
import secrets

from .events import SignedEvent


def wrap_event(event: SignedEvent) -> List[Any]:
    """["EVENT", event]"""
    return ["EVENT", event.to_dict()]


def build_req(*filters: Dict[str, Any], subscription_id: Optional[str] = None) -> List[Any]:
    """["REQ", subscription_id, filter, ...]; a random id is used when none is given"""
    if subscription_id is None:
        subscription_id = secrets.token_hex(16)
    return ["REQ", subscription_id, *filters]


def build_close(subscription_id: str) -> List[Any]:
    if not subscription_id:
        raise ValueError("subscription_id is required")
    return ["CLOSE", subscription_id]


def build_notice(message: str) -> List[Any]:
    if message is None:
        raise ValueError("message is required")
    return ["NOTICE", message]


def frame_to_json(frame: List[Any]) -> str:
    return json.dumps(frame, separators=(",", ":"), ensure_ascii=False)
