# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Errors raised while planning or executing a rolling update.

Control-plane failures (botocore ``ClientError`` and friends) are not wrapped;
they propagate unchanged and abort the rollout like any of these.
"""
from typing import List, Optional


class RolloutError(Exception):
    """Base class for all rollout failures."""


class NotFoundError(RolloutError):
    """A named slot does not exist in the cluster."""

    def __init__(self, slot_name: str):
        self.slot_name = slot_name
        super().__init__(f"service not found: {slot_name}")


class AmbiguousContainerError(RolloutError):
    """The task definition does not have exactly one container definition."""

    def __init__(self, family: str, container_count: int):
        self.family = family
        self.container_count = container_count
        super().__init__(
            f"task definition {family} has {container_count} container definitions, "
            "exactly one is supported"
        )


class ColourResolutionError(RolloutError):
    """
    The colour strategy could not tell which slot is active.

    Raised when no candidate or more than one candidate has running tasks.
    """

    def __init__(self, base_name: str, running_candidates: Optional[List[str]] = None):
        self.base_name = base_name
        self.running_candidates = list(running_candidates or [])
        if self.running_candidates:
            detail = "multiple running slots: " + ", ".join(self.running_candidates)
        else:
            detail = "no running slot"
        super().__init__(f"unable to determine next colour for {base_name} ({detail})")


class ServiceNotRunningError(RolloutError):
    """The previous slot is not ACTIVE or has no running tasks."""

    def __init__(self, slot_name: str, status: str, running_count: int):
        self.slot_name = slot_name
        self.status = status
        self.running_count = running_count
        super().__init__(
            f"service not running: {slot_name} (status={status}, running={running_count})"
        )


class TargetConflictError(RolloutError):
    """The target slot is already in service or still holds its name."""

    def __init__(self, slot_name: str, reason: str):
        self.slot_name = slot_name
        self.reason = reason
        super().__init__(f"target service {slot_name} {reason}")


class ConvergenceTimeoutError(RolloutError):
    """A slot still had pending tasks when its deadline expired."""

    def __init__(self, slot_name: str, timeout: float):
        self.slot_name = slot_name
        self.timeout = timeout
        super().__init__(f"service {slot_name} did not converge within {timeout:g}s")


class RolloutCancelledError(RolloutError):
    """The rollout was cancelled by the caller."""

    def __init__(self, slot_name: Optional[str] = None):
        self.slot_name = slot_name
        if slot_name:
            super().__init__(f"rollout cancelled while waiting on {slot_name}")
        else:
            super().__init__("rollout cancelled")
