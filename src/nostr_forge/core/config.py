"""
Engine configuration

Values come from keyword arguments or NOSTR_FORGE_* environment variables.
Keys are not part of the engine config; the CLI reads
NOSTR_FORGE_PRIVATE_KEY separately.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .pow import MAX_POW_TARGET


class EngineConfig(BaseSettings):
    """Proof-of-work and logging settings for an EventEngine"""

    pow_target: Optional[int] = Field(None, description="Required leading zero bits; None disables mining")
    pow_mode: Literal["exact", "minimum"] = Field("exact", description="Exactly pow_target zero bits, or at least")
    pow_max_attempts: Optional[int] = Field(None, description="Give up after this many nonces")
    pow_deadline_seconds: Optional[float] = Field(None, description="Give up after this many seconds")
    enforce_delegation_conditions: bool = Field(
        False, description="Reject events outside the attached delegation's conditions instead of warning"
    )
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="NOSTR_FORGE_", frozen=True)

    @field_validator("pow_target")
    @classmethod
    def pow_target_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= MAX_POW_TARGET:
            raise ValueError(f"pow_target must be in [0, {MAX_POW_TARGET}]")
        return v

    @field_validator("pow_max_attempts")
    @classmethod
    def max_attempts_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("pow_max_attempts must be >= 1")
        return v
