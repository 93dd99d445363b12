"""
Models for tracking a rollout as it moves through its states.
"""
from typing import List
from enum import Enum
from pydantic import BaseModel


class RolloutState(str, Enum):
    """
    States of the rolling update state machine.
    """
    PENDING = "pending"
    RESOLVE_NAMES = "resolve_names"
    VALIDATE_SOURCE = "validate_source"
    PUBLISH_TASK = "publish_task"
    ENSURE_TARGET_SLOT = "ensure_target_slot"
    SCALE_LOOP = "scale_loop"
    DRAIN_SOURCE = "drain_source"
    DELETE_SOURCE = "delete_source"
    DONE = "done"
    FAILED = "failed"


class SlotPair(BaseModel):
    """
    The resolved previous (active) and next (target) slot names.
    """
    previous: str
    next: str


class RolloutResult(BaseModel):
    """
    Summary of a completed rollout.
    """
    previous_slot: str
    next_slot: str
    task_definition_ref: str
    target_count: int
    steps: int = 0
    states: List[RolloutState] = []
