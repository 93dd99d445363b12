"""
Models describing what a single rollout should do.
"""
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator


class TimeoutPolicy(str, Enum):
    """
    What to do when a slot does not converge before its deadline.
    """
    PROCEED = "proceed"  # log a warning and issue the next mutation anyway
    ABORT = "abort"


class UpdatePlan(BaseModel):
    """
    Caller-supplied intent for one rollout.
    """
    previous_slot_name: str
    next_slot_name: Optional[str] = None
    image_override: Optional[str] = None
    desired_final_count: Optional[int] = Field(default=None, ge=0)

    # Durations in seconds
    convergence_timeout: float = Field(default=60.0, ge=0)
    step_interval: float = Field(default=30.0, ge=0)
    poll_interval: float = Field(default=10.0, ge=0)
    drain_poll_interval: float = Field(default=5.0, ge=0)

    timeout_policy: TimeoutPolicy = TimeoutPolicy.PROCEED

    @field_validator("previous_slot_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("invalid service name")
        return value

    @field_validator("next_slot_name", "image_override")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("desired_final_count")
    @classmethod
    def _zero_means_inherit(cls, value: Optional[int]) -> Optional[int]:
        # 0 keeps the previous slot's running count
        return value or None

    @model_validator(mode="after")
    def _distinct_slots(self) -> "UpdatePlan":
        if self.next_slot_name == self.previous_slot_name:
            raise ValueError("previous and next service names must differ")
        return self
