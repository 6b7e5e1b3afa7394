"""
Remote application store: environments and workloads registered per application.
"""

from typing import List, Protocol

from .models import Environment, Workload
from .ssm import SSMStore


class Store(Protocol):
    def get_environment(self, app: str, env: str) -> Environment: ...

    def list_environments(self, app: str) -> List[Environment]: ...

    def list_workloads(self, app: str) -> List[Workload]: ...

    def get_workload(self, app: str, name: str) -> Workload: ...


__all__ = ["Store", "SSMStore", "Environment", "Workload"]
