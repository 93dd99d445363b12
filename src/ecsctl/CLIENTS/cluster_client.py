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
Synchronous facade over the ECS control plane.

Only the calls a rolling update needs are exposed. Errors from the control
plane are never caught or retried here; waiting for eventual consistency is
the job of the convergence poller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..MODELS.service import Service
from ..MODELS.task_definition import TaskDefinition
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ClusterClient(ABC):
    """
    Operations on the services and task definitions of one cluster.
    """

    @abstractmethod
    def get_service(self, name: str) -> Service:
        """
        Read a service.

        Args:
            name: Service (slot) name.

        Returns:
            The service as currently reported by the control plane.

        Raises:
            NotFoundError: If the cluster has no service with that name.
        """

    @abstractmethod
    def get_task_definition(self, ref: str) -> TaskDefinition:
        """Read a task definition revision by ARN or ``family:revision``."""

    @abstractmethod
    def register_task_definition(self, task_definition: TaskDefinition) -> str:
        """
        Register a new revision.

        Returns:
            Reference (ARN) of the new revision.
        """

    @abstractmethod
    def create_service(self, name: str, task_ref: str, desired_count: int = 1) -> None:
        """Create a service running ``task_ref``."""

    @abstractmethod
    def update_service(
        self,
        name: str,
        task_ref: Optional[str] = None,
        desired_count: Optional[int] = None,
    ) -> None:
        """Change the task definition and/or desired count of a service."""

    @abstractmethod
    def delete_service(self, name: str) -> None:
        """Delete a service."""


class EcsClusterClient(ClusterClient):
    """
    ClusterClient backed by a boto3 ECS client.
    """

    def __init__(self, ecs_client: Any, cluster: str = "default"):
        """
        Initialize the client.

        Args:
            ecs_client: A ``boto3.client("ecs")`` instance.
            cluster: Name or ARN of the cluster every call is scoped to.
        """
        self.ecs = ecs_client
        self.cluster = cluster

    def get_service(self, name: str) -> Service:
        logger.debug("describe-services %s/%s", self.cluster, name)
        response = self.ecs.describe_services(cluster=self.cluster, services=[name])
        services = response.get("services", [])
        if len(services) != 1:
            raise NotFoundError(name)
        return Service.from_api(services[0])

    def get_task_definition(self, ref: str) -> TaskDefinition:
        logger.debug("describe-task-definition %s", ref)
        response = self.ecs.describe_task_definition(taskDefinition=ref)
        return TaskDefinition.from_api(response["taskDefinition"])

    def register_task_definition(self, task_definition: TaskDefinition) -> str:
        logger.debug("register-task-definition %s", task_definition.family)
        response = self.ecs.register_task_definition(**task_definition.to_register_kwargs())
        return response["taskDefinition"]["taskDefinitionArn"]

    def create_service(self, name: str, task_ref: str, desired_count: int = 1) -> None:
        logger.debug("create-service %s/%s desired=%d", self.cluster, name, desired_count)
        self.ecs.create_service(
            cluster=self.cluster,
            serviceName=name,
            taskDefinition=task_ref,
            desiredCount=desired_count,
        )

    def update_service(
        self,
        name: str,
        task_ref: Optional[str] = None,
        desired_count: Optional[int] = None,
    ) -> None:
        params: Dict[str, Any] = {"cluster": self.cluster, "service": name}
        if desired_count is not None:
            params["desiredCount"] = desired_count
        if task_ref is not None:
            params["taskDefinition"] = task_ref
        logger.debug("update-service %s/%s desired=%s task=%s", self.cluster, name, desired_count, task_ref)
        self.ecs.update_service(**params)

    def delete_service(self, name: str) -> None:
        logger.debug("delete-service %s/%s", self.cluster, name)
        self.ecs.delete_service(cluster=self.cluster, service=name)
