"""
Proof-of-work mining for events (NIP-13)

The miner appends a ["nonce", <nonce>, <target>] tag to a copy of the
event's tags and searches nonces until the event id satisfies the
difficulty predicate. The search is a lazy sequence of candidates, so a
caller can bound it by attempts or wall-clock time and gets
PowTargetNotReached instead of an endless loop.
"""

from typing import Iterator, Literal, NamedTuple, Optional, Tuple
import itertools
import logging
import time

from .crypto import compute_event_id
from .events import UnsignedEvent
from .exceptions import PowTargetNotReached

logger = logging.getLogger(__name__)

PowMode = Literal["exact", "minimum"]

NONCE_TAG = "nonce"

# An id has 256 bits, so no target above this can be met
MAX_POW_TARGET = 256


class Candidate(NamedTuple):
    nonce: int
    tag: Tuple[str, str, str]
    event_id: str


def count_leading_zero_bits(event_id: str) -> int:
    """Leading zero bits of a hex digest; 256 for an all-zero id"""
    bits = len(event_id) * 4
    return bits - int(event_id, 16).bit_length()


def matches_difficulty(event_id: str, target: int, mode: PowMode = "exact") -> bool:
    """
    Difficulty predicate

    "exact" requires exactly target leading zero bits; "minimum" accepts
    target or more.
    """
    zeros = count_leading_zero_bits(event_id)
    if mode == "exact":
        return zeros == target
    return zeros >= target


def nonce_tag(nonce: int, target: int) -> Tuple[str, str, str]:
    return (NONCE_TAG, str(nonce), str(target))


def iter_candidates(event: UnsignedEvent, target: int, start: int = 1) -> Iterator[Candidate]:
    """
    Lazily yield (nonce, tag, id) for nonces start, start + 1, ...

    The event itself is never modified; each candidate is the id of a copy
    of the event with the nonce tag appended. Restart from any nonce with
    start.
    """
    base_tags = [list(t) for t in event.tags]
    for nonce in itertools.count(start):
        tag = nonce_tag(nonce, target)
        candidate = event.model_copy(update={"tags": base_tags + [list(tag)]})
        yield Candidate(nonce, tag, compute_event_id(candidate))


def mine(
    event: UnsignedEvent,
    target: int,
    max_attempts: Optional[int] = None,
    deadline: Optional[float] = None,
    mode: PowMode = "exact",
    start: int = 1,
) -> Tuple[UnsignedEvent, str]:
    """
    Search for a nonce that makes the event id meet the target

    Returns the event with the winning nonce tag appended (exactly once)
    and its id. max_attempts caps the number of candidates tried; deadline
    is a budget in seconds. Without either the search runs until it
    succeeds.
    """
    if not 0 <= target <= MAX_POW_TARGET:
        raise ValueError(f"Difficulty target must be in [0, {MAX_POW_TARGET}]")

    started = time.monotonic()
    attempts = 0
    logger.debug("Mining kind %d event at difficulty %d (%s)", event.kind, target, mode)

    for candidate in iter_candidates(event, target, start=start):
        attempts += 1
        if matches_difficulty(candidate.event_id, target, mode):
            logger.debug(
                "Mined %s with nonce %d after %d attempts in %.3fs",
                candidate.event_id, candidate.nonce, attempts, time.monotonic() - started,
            )
            mined = event.model_copy(update={"tags": [list(t) for t in event.tags] + [list(candidate.tag)]})
            return mined, candidate.event_id
        if max_attempts is not None and attempts >= max_attempts:
            raise PowTargetNotReached(target, attempts, "attempt limit")
        if deadline is not None and time.monotonic() - started >= deadline:
            raise PowTargetNotReached(target, attempts, "deadline")

    raise AssertionError("unreachable")  # pragma: no cover
