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
Blocking waits for a service to finish applying its last change.
"""
import logging
import threading
from typing import Callable, Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_delay,
    stop_when_event_set,
    wait_fixed,
)

from ..CLIENTS.cluster_client import ClusterClient

logger = logging.getLogger(__name__)


class ConvergencePoller:
    """
    Polls a service until it has no pending tasks.

    A service is converged once ``pendingCount`` is zero. Waits are bounded by
    a deadline and can be cut short from another thread through
    ``cancel_event``.
    """

    def __init__(
        self,
        client: ClusterClient,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initializes the poller.

        Args:
            client: Client for the cluster the service lives in.
            cancel_event: Event that aborts any wait in progress when set.
            sleep: Sleep function between checks. Defaults to waiting on
                ``cancel_event`` so that cancelling wakes the poller up.
        """
        self.client = client
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep or self.cancel_event.wait

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def is_converged(self, slot_name: str) -> bool:
        service = self.client.get_service(slot_name)
        logger.debug(
            "%s: running=%d pending=%d desired=%d",
            slot_name,
            service.running_count,
            service.pending_count,
            service.desired_count,
        )
        return service.is_converged

    def wait(self, slot_name: str, interval: float, deadline: float) -> bool:
        """
        Blocks until the service converges, the deadline passes or the wait
        is cancelled.

        Args:
            slot_name: Service to watch.
            interval: Seconds between checks.
            deadline: Seconds after which to give up.

        Returns:
            True if the service converged, False on timeout or cancellation.
            Errors raised while reading the service propagate.
        """
        retrying = Retrying(
            retry=retry_if_result(lambda converged: not converged),
            wait=wait_fixed(interval),
            stop=stop_after_delay(deadline) | stop_when_event_set(self.cancel_event),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            retry_error_callback=lambda retry_state: False,
        )
        converged = retrying(self.is_converged, slot_name)
        if converged:
            logger.debug("%s converged", slot_name)
        return converged
