"""
Service and job deploy commands.
"""

import logging
import uuid
from typing import Dict, Optional

from ..cloudformation import StackConfig, workload_stack_name
from ..lifecycle import ActionCommand
from ..manifestinfo import is_job, is_known
from ..tags import base_tags

logger = logging.getLogger(__name__)


class DeployWorkloadCommand(ActionCommand):
    """Deploys one workload's stack into an environment."""

    kind = "workload"

    def __init__(
        self,
        app: str,
        env: str,
        name: str,
        store,
        ws,
        deployer,
        image_tag: Optional[str] = None,
        resource_tags: Optional[Dict[str, str]] = None,
        force_new_update: bool = False,
        disable_rollback: bool = False,
        detach: bool = False,
    ):
        self.app = app
        self.env = env
        self.name = name
        self.store = store
        self.ws = ws
        self.deployer = deployer
        self.image_tag = image_tag
        self.resource_tags = resource_tags or {}
        self.force_new_update = force_new_update
        self.disable_rollback = disable_rollback
        self.detach = detach

        self.workload_type: Optional[str] = None
        self.template: Optional[str] = None
        self.result: Optional[str] = None

    @property
    def stack_name(self) -> str:
        return workload_stack_name(self.app, self.env, self.name)

    def validate(self) -> None:
        if self.image_tag is not None and (not self.image_tag or any(c.isspace() for c in self.image_tag)):
            raise ValueError(f"image tag {self.image_tag!r} is invalid")
        base_tags(self.app, self.env, self.name, extra=self.resource_tags)

    def ask(self) -> None:
        self.store.get_environment(self.app, self.env)
        wl_type = self.ws.read_workload_manifest(self.name).workload_type()
        if not is_known(wl_type):
            raise ValueError(f"unrecognized workload type {wl_type!r}")
        self.workload_type = wl_type
        self.template = self.ws.read_workload_template(self.name)

    def execute(self) -> None:
        params = {
            "AppName": self.app,
            "EnvName": self.env,
            "WorkloadName": self.name,
        }
        if self.image_tag:
            params["ImageTag"] = self.image_tag
        if self.force_new_update:
            params["ForceUpdateID"] = str(uuid.uuid4())

        logger.info(f"Deploying {self.kind} {self.name} to environment {self.env}")
        self.result = self.deployer.deploy(
            StackConfig(
                name=self.stack_name,
                template_body=self.template,
                parameters=params,
                tags=base_tags(self.app, self.env, self.name, extra=self.resource_tags),
                disable_rollback=self.disable_rollback,
            ),
            wait=not self.detach,
        )


class DeploySvcCommand(DeployWorkloadCommand):
    kind = "service"

    def ask(self) -> None:
        super().ask()
        if is_job(self.workload_type):
            raise ValueError(f"{self.name} is a {self.workload_type}, not a service")

    def recommend_actions(self) -> None:
        if self.detach:
            logger.info(f"Deployment of {self.name} started. Track it with "
                        f"`aws cloudformation describe-stacks --stack-name {self.stack_name}`.")
            return
        outputs = self.deployer.outputs(self.stack_name)
        if outputs:
            logger.info(f"Deployed service {self.name}:")
            for key, value in sorted(outputs.items()):
                logger.info(f"  - {key}: {value}")
        else:
            logger.info(f"Deployed service {self.name}.")


class DeployJobCommand(DeployWorkloadCommand):
    kind = "job"

    def ask(self) -> None:
        super().ask()
        if not is_job(self.workload_type):
            raise ValueError(f"{self.name} is a {self.workload_type}, not a job")

    def recommend_actions(self) -> None:
        if self.detach:
            logger.info(f"Deployment of job {self.name} started. Track it with "
                        f"`aws cloudformation describe-stacks --stack-name {self.stack_name}`.")
            return
        logger.info(f"Deployed job {self.name}. It will run on the schedule in its manifest.")
