"""
Registering workloads that only exist as manifests.
"""

import logging

from ..store.models import Workload

logger = logging.getLogger(__name__)


class WorkloadInitializer:
    """Adds a workload to an application without writing a manifest."""

    def __init__(self, store):
        self.store = store

    def add_workload_to_app(self, app: str, name: str, workload_type: str) -> None:
        logger.info(f"Adding {workload_type} {name} to application {app}")
        self.store.create_workload(Workload(app=app, name=name, type=workload_type))
        logger.info(f"Added {name} to application {app}")
