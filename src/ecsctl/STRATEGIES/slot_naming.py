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
Policies for deciding which slot is being replaced and which replaces it.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..CLIENTS.cluster_client import ClusterClient
from ..MODELS.rollout import SlotPair
from ..MODELS.service import Service, ServiceStatus
from ..MODELS.update_plan import UpdatePlan
from ..exceptions import ColourResolutionError, NotFoundError

logger = logging.getLogger(__name__)

BLUE = "blue"
GREEN = "green"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class SlotNamingStrategy(ABC):
    """
    Resolves the (previous, next) slot pair for a rollout.
    """

    name = "base"

    @abstractmethod
    def resolve(self, client: ClusterClient, plan: UpdatePlan) -> SlotPair:
        """
        Resolves slot names from the plan and the current cluster state.

        :param client: Client for the target cluster.
        :param plan: The rollout plan.
        :return: The resolved slot pair.
        :raises NotFoundError: If the previous slot cannot be found.
        """

    def name_for_inactive(self, pair: SlotPair) -> str:
        """
        Name to create the target under when ``pair.next`` is INACTIVE.
        """
        return pair.next


class ColourPairStrategy(SlotNamingStrategy):
    """
    Alternates between ``<base>-blue`` and ``<base>-green``.

    The bare base name is accepted as the active slot too, for services that
    predate the colour convention; its successor is the blue slot.
    """

    name = "colour"

    def candidates(self, base: str) -> List[str]:
        return [base, f"{base}-{BLUE}", f"{base}-{GREEN}"]

    def successor(self, base: str, active: str) -> str:
        if active == f"{base}-{BLUE}":
            return f"{base}-{GREEN}"
        return f"{base}-{BLUE}"

    def resolve(self, client: ClusterClient, plan: UpdatePlan) -> SlotPair:
        base = plan.previous_slot_name
        found: Dict[str, Service] = {}
        for name in self.candidates(base):
            try:
                found[name] = client.get_service(name)
            except NotFoundError:
                continue

        if not found:
            raise NotFoundError(base)

        running = [name for name, svc in found.items() if svc.is_running]
        if len(running) != 1:
            raise ColourResolutionError(base, running)

        active = running[0]
        pair = SlotPair(previous=active, next=self.successor(base, active))
        logger.info("Active slot is %s, next slot is %s", pair.previous, pair.next)
        return pair


class ExplicitPairStrategy(SlotNamingStrategy):
    """
    Uses the slot names given by the caller.

    A next slot that was decommissioned (INACTIVE) is never reused; a
    timestamped name derived from the previous slot is used instead.
    """

    name = "explicit"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def timestamped_name(self, previous: str) -> str:
        return f"{previous}-{self.clock().strftime(TIMESTAMP_FORMAT)}"

    def name_for_inactive(self, pair: SlotPair) -> str:
        return self.timestamped_name(pair.previous)

    def resolve(self, client: ClusterClient, plan: UpdatePlan) -> SlotPair:
        if not plan.next_slot_name:
            raise ValueError("explicit-pair strategy requires a next service name")

        previous = client.get_service(plan.previous_slot_name)
        next_name = plan.next_slot_name

        try:
            existing = client.get_service(next_name)
        except NotFoundError:
            existing = None

        if existing is not None and existing.status == ServiceStatus.INACTIVE:
            replacement = self.timestamped_name(previous.name)
            logger.info("Service %s is inactive, using %s instead", next_name, replacement)
            next_name = replacement

        return SlotPair(previous=previous.name, next=next_name)


STRATEGIES = {
    ColourPairStrategy.name: ColourPairStrategy,
    ExplicitPairStrategy.name: ExplicitPairStrategy,
}


def get_strategy(name: str) -> SlotNamingStrategy:
    """
    Returns a strategy instance by name (``colour`` or ``explicit``).
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown slot naming strategy: {name}") from None
