"""
Models for task definition revisions.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class TaskDefinition(BaseModel):
    """
    An immutable template describing how to run a container.

    Container definitions and volumes are kept as the raw mappings the
    control plane returns so they can be registered again verbatim.
    """
    family: str
    container_definitions: List[Dict[str, Any]] = []
    volumes: List[Dict[str, Any]] = []

    arn: Optional[str] = None
    revision: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TaskDefinition":
        """Builds a task definition from a describe-task-definition payload."""
        return cls(
            family=data["family"],
            container_definitions=data.get("containerDefinitions", []),
            volumes=data.get("volumes", []),
            arn=data.get("taskDefinitionArn"),
            revision=data.get("revision"),
        )

    def to_register_kwargs(self) -> Dict[str, Any]:
        """Arguments for register-task-definition."""
        return {
            "family": self.family,
            "containerDefinitions": self.container_definitions,
            "volumes": self.volumes,
        }
