"""
Zap poll events (NIP-69)

A poll presents two or more options that participants vote on by sending
zap events carrying a poll_option tag.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.events import EventKinds, EventPayload
from ..core.exceptions import PayloadError


class PollOptions(BaseModel):
    """Optional poll settings. Unset fields produce no tag."""

    value_minimum: Optional[int] = Field(None, description="Minimum satoshis per vote")
    value_maximum: Optional[int] = Field(None, description="Maximum satoshis per vote")
    closed_at: Optional[int] = Field(None, description="Unix timestamp the poll closes at")
    reference: Optional[str] = Field(None, description="Parent note id")


def poll_payload(content: str, poll_options: List[str], options: Optional[PollOptions] = None) -> EventPayload:
    if not isinstance(poll_options, (list, tuple)) or len(poll_options) < 2:
        raise PayloadError("Invalid options: a poll needs at least two options")
    options = options or PollOptions()

    tags = [["poll_option", str(index), option] for index, option in enumerate(poll_options)]
    if options.value_minimum is not None:
        tags.append(["value_minimum", str(options.value_minimum)])
    if options.value_maximum is not None:
        tags.append(["value_maximum", str(options.value_maximum)])
    if options.closed_at is not None:
        tags.append(["closed_at", str(options.closed_at)])
    if options.reference:
        tags.append(["e", options.reference])

    return EventPayload(kind=EventKinds.POLL, tags=tags, content=content)
