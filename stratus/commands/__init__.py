"""
Lifecycle commands driven by the deploy controller.
"""

from .env import DeployEnvCommand, InitEnvCommand
from .initialize import WorkloadInitializer
from .workload import DeployJobCommand, DeploySvcCommand

__all__ = [
    "DeployEnvCommand",
    "InitEnvCommand",
    "WorkloadInitializer",
    "DeployJobCommand",
    "DeploySvcCommand",
]
