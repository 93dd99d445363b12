"""
Republishing of task definitions for the next slot.
"""
import logging
from typing import Optional

from ..CLIENTS.cluster_client import ClusterClient
from ..MODELS.task_definition import TaskDefinition
from ..exceptions import AmbiguousContainerError

logger = logging.getLogger(__name__)


class TaskDefinitionPublisher:
    """
    Registers a copy of the active slot's task definition as a new revision.
    """
    def __init__(self, client: ClusterClient):
        """
        Initializes the publisher.

        :param client: Client used to register the new revision.
        """
        self.client = client

    def prepare(self, task_definition: TaskDefinition, image_override: Optional[str] = None) -> TaskDefinition:
        """
        Builds the definition to register, leaving the input untouched.

        :param task_definition: The active slot's task definition.
        :param image_override: New image for the single container, if any.
        :return: A copy carrying the same family and volumes.
        :raises AmbiguousContainerError: Unless there is exactly one container definition.
        """
        containers = task_definition.container_definitions
        if len(containers) != 1:
            raise AmbiguousContainerError(task_definition.family, len(containers))

        container = dict(containers[0])
        if image_override:
            logger.info("Replacing image %s with %s", container.get("image"), image_override)
            container["image"] = image_override

        return TaskDefinition(
            family=task_definition.family,
            container_definitions=[container],
            volumes=task_definition.volumes,
        )

    def publish(self, task_definition: TaskDefinition, image_override: Optional[str] = None) -> str:
        """
        Registers the new revision.

        :return: Reference of the registered revision.
        """
        new_definition = self.prepare(task_definition, image_override)
        ref = self.client.register_task_definition(new_definition)
        logger.info("Registered task definition %s", ref)
        return ref
