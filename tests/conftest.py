import logging
from typing import Dict, List, Optional

import pytest

from ecsctl.CLIENTS.cluster_client import ClusterClient
from ecsctl.MANAGERS.convergence_poller import ConvergencePoller
from ecsctl.MANAGERS.rolling_update import RollingUpdateOrchestrator
from ecsctl.MODELS.service import Service
from ecsctl.MODELS.task_definition import TaskDefinition
from ecsctl.exceptions import NotFoundError

ACCOUNT_PREFIX = "arn:aws:ecs:us-east-1:123456789012:task-definition"


class FakeCluster(ClusterClient):
    """
    In-memory cluster. Updates land immediately; ``lag`` makes a service
    report pending tasks for that many reads after each change.
    """

    def __init__(self, lag: int = 0):
        self.lag = lag
        self.services: Dict[str, dict] = {}
        self.task_definitions: Dict[str, TaskDefinition] = {}
        self.revisions: Dict[str, int] = {}
        self.mutations: List[tuple] = []
        self.reads: List[str] = []

    def add_task_definition(self, family: str = "web", containers: Optional[List[dict]] = None) -> str:
        if containers is None:
            containers = [{"name": family, "image": f"{family}:1.0", "essential": True}]
        revision = self.revisions.get(family, 0) + 1
        self.revisions[family] = revision
        ref = f"{ACCOUNT_PREFIX}/{family}:{revision}"
        self.task_definitions[ref] = TaskDefinition(
            family=family,
            container_definitions=containers,
            volumes=[{"name": "data", "host": {"sourcePath": "/srv/data"}}],
            arn=ref,
            revision=revision,
        )
        return ref

    def add_service(self, name: str, running: int, status: str = "ACTIVE", task_ref: Optional[str] = None):
        if task_ref is None:
            task_ref = self.add_task_definition()
        self.services[name] = {
            "status": status,
            "desired": running,
            "running": running,
            "pending_reads": 0,
            "task_ref": task_ref,
        }

    def running(self, name: str) -> int:
        return self.services[name]["running"]

    def mutation_names(self) -> List[str]:
        return [m[0] for m in self.mutations]

    # ClusterClient

    def get_service(self, name: str) -> Service:
        self.reads.append(name)
        if name not in self.services:
            raise NotFoundError(name)
        svc = self.services[name]
        pending = 0
        if svc["pending_reads"] > 0:
            svc["pending_reads"] -= 1
            pending = 1
        return Service(
            name=name,
            status=svc["status"],
            desired_count=svc["desired"],
            running_count=svc["running"],
            pending_count=pending,
            task_definition_ref=svc["task_ref"],
        )

    def get_task_definition(self, ref: str) -> TaskDefinition:
        return self.task_definitions[ref]

    def register_task_definition(self, task_definition: TaskDefinition) -> str:
        self.mutations.append(("register", task_definition.family))
        ref = self.add_task_definition(task_definition.family, task_definition.container_definitions)
        self.task_definitions[ref].volumes = task_definition.volumes
        return ref

    def create_service(self, name: str, task_ref: str, desired_count: int = 1) -> None:
        self.mutations.append(("create", name, desired_count))
        if name in self.services and self.services[name]["status"] != "INACTIVE":
            raise RuntimeError(f"Creation of service was not idempotent: {name}")
        self.services[name] = {
            "status": "ACTIVE",
            "desired": desired_count,
            "running": desired_count,
            "pending_reads": self.lag,
            "task_ref": task_ref,
        }

    def update_service(self, name: str, task_ref: Optional[str] = None, desired_count: Optional[int] = None) -> None:
        self.mutations.append(("update", name, desired_count))
        if name not in self.services:
            raise NotFoundError(name)
        svc = self.services[name]
        if task_ref is not None:
            svc["task_ref"] = task_ref
        if desired_count is not None:
            svc["desired"] = desired_count
            svc["running"] = desired_count
        svc["pending_reads"] = self.lag

    def delete_service(self, name: str) -> None:
        self.mutations.append(("delete", name))
        if name not in self.services:
            raise NotFoundError(name)
        del self.services[name]


def no_sleep(seconds):
    pass


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def lagging_cluster():
    return FakeCluster(lag=2)


@pytest.fixture
def make_orchestrator():
    def _make(client, strategy, sleep=no_sleep):
        poller = ConvergencePoller(client, sleep=sleep)
        return RollingUpdateOrchestrator(client, strategy, poller=poller, sleep=no_sleep)
    return _make


@pytest.fixture(autouse=True)
def reset_ecsctl_logging():
    yield
    logger = logging.getLogger("ecsctl")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)
