"""
Exception hierarchy for Nostr Forge

All errors are raised synchronously from the call that detected them.
Delegation verification never raises; it answers True or False.
"""

from typing import Optional


class NostrForgeError(Exception):
    """Base exception for nostr_forge"""


class ValidationError(NostrForgeError):
    """An event field has the wrong shape"""

    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"Invalid {field}: {constraint}")


class MissingKeyError(NostrForgeError):
    """No usable key for the requested operation"""


class PayloadError(NostrForgeError):
    """A payload builder received unusable arguments"""


class PowTargetNotReached(NostrForgeError):
    """Proof-of-work search stopped before the target was met"""

    def __init__(self, target: int, attempts: int, reason: Optional[str] = None):
        self.target = target
        self.attempts = attempts
        message = f"Difficulty {target} not reached after {attempts} attempts"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
