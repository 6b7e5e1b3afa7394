"""
Environment init and deploy commands.
"""

import logging
import re
import uuid
from typing import Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..cloudformation import StackConfig, env_stack_name
from ..errors import IdentityError, NoSuchEnvironmentError
from ..lifecycle import Command
from ..settings import get_default_region
from ..store.models import Environment
from ..tags import base_tags

logger = logging.getLogger(__name__)

ENV_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]{0,62}$")


def validate_env_name(name: str) -> None:
    if not ENV_NAME_PATTERN.match(name or ""):
        raise ValueError(
            f"environment name {name!r} is invalid: it must start with a lowercase letter "
            "and contain only lowercase letters, numbers and hyphens"
        )


class InitEnvCommand(Command):
    """
    Registers an environment with the application using the default configuration.

    No network questions are asked and no manifest is written; the workspace
    manifest is expected to exist already.
    """

    def __init__(self, app: str, name: str, store, session, region: Optional[str] = None):
        self.app = app
        self.name = name
        self.store = store
        self.session = session
        self.region = region
        self.account_id: Optional[str] = None

    def validate(self) -> None:
        if not self.app:
            raise ValueError("application name is required")
        validate_env_name(self.name)
        try:
            self.store.get_environment(self.app, self.name)
        except NoSuchEnvironmentError:
            return
        raise ValueError(f"environment {self.name} already exists in application {self.app}")

    def ask(self) -> None:
        if not self.region:
            self.region = get_default_region() or self.session.region_name
        if not self.region:
            raise ValueError("no region configured: pass --region or set AWS_REGION")

    def execute(self) -> None:
        sts = self.session.client("sts", region_name=self.region)
        try:
            self.account_id = sts.get_caller_identity()["Account"]
        except (BotoCoreError, ClientError) as e:
            raise IdentityError("get caller identity", e) from e
        self.store.create_environment(Environment(
            app=self.app,
            name=self.name,
            region=self.region,
            account_id=self.account_id,
        ))
        logger.info(f"Environment {self.name} initialized in application {self.app} ({self.account_id}, {self.region})")


class DeployEnvCommand(Command):
    """Deploys the environment stack from its pre-rendered template."""

    def __init__(
        self,
        app: str,
        name: str,
        store,
        ws,
        deployer,
        resource_tags: Optional[Dict[str, str]] = None,
        force_new_update: bool = False,
        disable_rollback: bool = False,
        detach: bool = False,
    ):
        self.app = app
        self.name = name
        self.store = store
        self.ws = ws
        self.deployer = deployer
        self.resource_tags = resource_tags or {}
        self.force_new_update = force_new_update
        self.disable_rollback = disable_rollback
        self.detach = detach
        self.template: Optional[str] = None

    def validate(self) -> None:
        validate_env_name(self.name)
        # Reserved keys are rejected here rather than mid-deploy.
        base_tags(self.app, self.name, extra=self.resource_tags)

    def ask(self) -> None:
        self.store.get_environment(self.app, self.name)
        self.ws.read_environment_manifest(self.name)
        self.template = self.ws.read_environment_template(self.name)

    def execute(self) -> None:
        params = {"AppName": self.app, "EnvironmentName": self.name}
        if self.force_new_update:
            params["ForceUpdateID"] = str(uuid.uuid4())
        result = self.deployer.deploy(
            StackConfig(
                name=env_stack_name(self.app, self.name),
                template_body=self.template,
                parameters=params,
                tags=base_tags(self.app, self.name, extra=self.resource_tags),
                disable_rollback=self.disable_rollback,
            ),
            wait=not self.detach,
        )
        logger.info(f"Environment {self.name} deployment: {result}")
