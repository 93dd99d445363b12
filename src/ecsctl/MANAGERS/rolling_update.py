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
Rolling update of a service from one deployment slot to another.

The next slot is scaled up one task at a time while the previous slot is
scaled down in lock-step. Once the next slot reaches the target capacity the
previous slot is drained and deleted. Nothing is rolled back on failure.
"""
import logging
from typing import Callable, List, Optional

from ..CLIENTS.cluster_client import ClusterClient
from ..MODELS.rollout import RolloutResult, RolloutState, SlotPair
from ..MODELS.service import Service, ServiceStatus
from ..MODELS.update_plan import TimeoutPolicy, UpdatePlan
from ..PUBLISHERS.task_definition_publisher import TaskDefinitionPublisher
from ..STRATEGIES.slot_naming import SlotNamingStrategy
from ..exceptions import (
    ConvergenceTimeoutError,
    NotFoundError,
    RolloutCancelledError,
    ServiceNotRunningError,
    TargetConflictError,
)
from .convergence_poller import ConvergencePoller

logger = logging.getLogger(__name__)


class RollingUpdateOrchestrator:
    """
    Drives a full cutover from the previous slot to the next slot.
    """
    def __init__(self,
                 client: ClusterClient,
                 strategy: SlotNamingStrategy,
                 publisher: Optional[TaskDefinitionPublisher] = None,
                 poller: Optional[ConvergencePoller] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        """
        Initializes the orchestrator.

        :param client: Client for the target cluster.
        :param strategy: Policy that resolves the slot names.
        :param publisher: Task definition publisher, built from ``client`` if omitted.
        :param poller: Convergence poller, built from ``client`` if omitted.
        :param sleep: Pause between scale steps. Defaults to waiting on the
            poller's cancel event so that cancelling interrupts the pause.
        """
        self.client = client
        self.strategy = strategy
        self.publisher = publisher or TaskDefinitionPublisher(client)
        self.poller = poller or ConvergencePoller(client)
        self._sleep = sleep or self.poller.cancel_event.wait

        self.state = RolloutState.PENDING
        self.states: List[RolloutState] = []

    def cancel(self):
        """
        Requests cancellation. Safe to call from another thread; the
        rollout stops at its next wait.
        """
        logger.warning("Cancellation requested")
        self.poller.cancel()

    def run(self, plan: UpdatePlan) -> RolloutResult:
        """
        Executes the rollout described by ``plan``.

        :param plan: What to roll out.
        :return: Summary of the completed rollout.
        :raises RolloutError: On any rollout failure. The state becomes FAILED
            for any exception, KeyboardInterrupt included.
        """
        self.states = []
        try:
            return self._run(plan)
        except BaseException:
            self._enter(RolloutState.FAILED)
            raise

    def _enter(self, state: RolloutState):
        self.state = state
        self.states.append(state)
        logger.debug("State: %s", state.value)

    def _run(self, plan: UpdatePlan) -> RolloutResult:
        self._enter(RolloutState.RESOLVE_NAMES)
        pair = self.strategy.resolve(self.client, plan)

        self._enter(RolloutState.VALIDATE_SOURCE)
        previous = self.client.get_service(pair.previous)
        if previous.status != ServiceStatus.ACTIVE or not previous.is_running:
            raise ServiceNotRunningError(previous.name, previous.status.value, previous.running_count)

        self._enter(RolloutState.PUBLISH_TASK)
        task_definition = self.client.get_task_definition(previous.task_definition_ref)
        task_ref = self.publisher.publish(task_definition, plan.image_override)

        self._enter(RolloutState.ENSURE_TARGET_SLOT)
        next_name = self._ensure_target_slot(pair, task_ref)
        pair = SlotPair(previous=pair.previous, next=next_name)

        target_count = plan.desired_final_count or previous.running_count
        logger.info("Rolling %s -> %s to %d tasks", pair.previous, pair.next, target_count)

        self._enter(RolloutState.SCALE_LOOP)
        steps = 0
        while True:
            prev_svc = self.client.get_service(pair.previous)
            next_svc = self.client.get_service(pair.next)
            if next_svc.running_count >= target_count:
                break
            self._step(pair, prev_svc, next_svc, plan)
            steps += 1
            logger.info("Container started: waiting %gs", plan.step_interval)
            self._pause(plan.step_interval)

        self._enter(RolloutState.DRAIN_SOURCE)
        if prev_svc.running_count != 0:
            self.client.update_service(pair.previous, desired_count=0)
            self._await(pair.previous, plan.drain_poll_interval, plan)

        self._enter(RolloutState.DELETE_SOURCE)
        self.client.delete_service(pair.previous)
        logger.info("Deleted %s", pair.previous)

        self._enter(RolloutState.DONE)
        return RolloutResult(
            previous_slot=pair.previous,
            next_slot=pair.next,
            task_definition_ref=task_ref,
            target_count=target_count,
            steps=steps,
            states=list(self.states),
        )

    def _ensure_target_slot(self, pair: SlotPair, task_ref: str) -> str:
        """
        Makes sure the next slot exists and is ready to scale up.

        :return: The name the next slot ended up with.
        """
        try:
            existing: Optional[Service] = self.client.get_service(pair.next)
        except NotFoundError:
            existing = None

        if existing is None:
            logger.info("Creating service %s", pair.next)
            self.client.create_service(pair.next, task_ref, desired_count=1)
            return pair.next

        if existing.is_running:
            raise TargetConflictError(existing.name, f"already running {existing.running_count} tasks")

        if existing.status == ServiceStatus.INACTIVE:
            name = self.strategy.name_for_inactive(pair)
            logger.info("Service %s is inactive, creating %s", pair.next, name)
            self.client.create_service(name, task_ref, desired_count=1)
            return name

        if existing.status == ServiceStatus.DRAINING:
            raise TargetConflictError(existing.name, "is still draining")

        # Active but empty: reuse it with the new revision
        self.client.update_service(existing.name, task_ref=task_ref, desired_count=0)
        return existing.name

    def _step(self, pair: SlotPair, prev_svc: Service, next_svc: Service, plan: UpdatePlan):
        """
        Moves one unit of capacity from the previous slot to the next slot.
        The increment is observed before the decrement is issued.
        """
        up = next_svc.running_count + 1
        logger.info("Scaling %s to %d", pair.next, up)
        self.client.update_service(pair.next, desired_count=up)
        self._await(pair.next, plan.poll_interval, plan)

        if prev_svc.running_count > 0:
            down = prev_svc.running_count - 1
            logger.info("Scaling %s to %d", pair.previous, down)
            self.client.update_service(pair.previous, desired_count=down)
            self._await(pair.previous, plan.poll_interval, plan)

    def _await(self, slot_name: str, interval: float, plan: UpdatePlan):
        converged = self.poller.wait(slot_name, interval, plan.convergence_timeout)
        if self.poller.cancelled:
            raise RolloutCancelledError(slot_name)
        if converged:
            return
        if plan.timeout_policy == TimeoutPolicy.ABORT:
            raise ConvergenceTimeoutError(slot_name, plan.convergence_timeout)
        logger.warning(
            "%s did not converge within %gs, continuing", slot_name, plan.convergence_timeout
        )

    def _pause(self, seconds: float):
        if seconds > 0:
            self._sleep(seconds)
        if self.poller.cancelled:
            raise RolloutCancelledError()
