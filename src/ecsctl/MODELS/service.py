"""
Models for ECS services acting as deployment slots.
"""
from typing import Any, Dict
from enum import Enum
from pydantic import BaseModel, Field


class ServiceStatus(str, Enum):
    """
    Lifecycle status reported by the control plane for a service.
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DRAINING = "DRAINING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class Service(BaseModel):
    """
    A named deployment slot in a cluster.

    Counts are eventually consistent with the control plane; re-read the
    service rather than trusting a stale copy.
    """
    name: str
    status: ServiceStatus = ServiceStatus.UNKNOWN
    desired_count: int = Field(default=0, ge=0)
    running_count: int = Field(default=0, ge=0)
    pending_count: int = Field(default=0, ge=0)
    task_definition_ref: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Service":
        """
        Builds a service from a describe-services record.

        :param data: One entry of the ``services`` list.
        :return: The parsed service.
        """
        return cls(
            name=data["serviceName"],
            status=ServiceStatus(data.get("status", "UNKNOWN")),
            desired_count=data.get("desiredCount", 0),
            running_count=data.get("runningCount", 0),
            pending_count=data.get("pendingCount", 0),
            task_definition_ref=data.get("taskDefinition", ""),
        )

    @property
    def is_running(self) -> bool:
        return self.running_count > 0

    @property
    def is_converged(self) -> bool:
        return self.pending_count == 0
