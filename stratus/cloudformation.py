"""
CloudFormation stack deployment for pre-rendered templates.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import ClientError, WaiterError

from .errors import StackError
from .tags import to_cfn_tags

logger = logging.getLogger(__name__)

CAPABILITIES = ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM", "CAPABILITY_AUTO_EXPAND"]
NO_UPDATES_MESSAGE = "No updates are to be performed"

STACK_CREATED = "created"
STACK_UPDATED = "updated"
STACK_UNCHANGED = "unchanged"


@dataclass
class StackConfig:
    """A stack to create or update."""
    name: str
    template_body: str
    parameters: Dict[str, str] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    disable_rollback: bool = False


def env_stack_name(app: str, env: str) -> str:
    return f"{app}-{env}"


def workload_stack_name(app: str, env: str, name: str) -> str:
    return f"{app}-{env}-{name}"


class StackDeployer:
    """Creates or updates stacks and optionally waits for them to settle."""

    def __init__(self, client=None, region: Optional[str] = None):
        self.client = client or boto3.client("cloudformation", region_name=region)

    def deploy(self, stack: StackConfig, wait: bool = True) -> str:
        """
        Create the stack if it doesn't exist, otherwise update it.

        Args:
            stack: Stack to deploy
            wait: Block until the stack reaches a terminal state

        Returns:
            STACK_CREATED, STACK_UPDATED or STACK_UNCHANGED

        Raises:
            StackError: If the API call fails or the stack ends in a failed state
        """
        exists = self._exists(stack.name)
        kwargs = {
            "StackName": stack.name,
            "TemplateBody": stack.template_body,
            "Parameters": self._parameters(stack),
            "Tags": to_cfn_tags(stack.tags),
            "Capabilities": CAPABILITIES,
            "DisableRollback": stack.disable_rollback,
        }

        if not exists:
            logger.info(f"Creating stack {stack.name}")
            try:
                self.client.create_stack(**kwargs)
            except ClientError as e:
                raise StackError(f"create stack {stack.name}", e) from e
            if wait:
                self._wait("stack_create_complete", stack.name)
            return STACK_CREATED

        logger.info(f"Updating stack {stack.name}")
        try:
            self.client.update_stack(**kwargs)
        except ClientError as e:
            if NO_UPDATES_MESSAGE in str(e):
                logger.info(f"Stack {stack.name} is already up to date")
                return STACK_UNCHANGED
            raise StackError(f"update stack {stack.name}", e) from e
        if wait:
            self._wait("stack_update_complete", stack.name)
        return STACK_UPDATED

    def outputs(self, name: str) -> Dict[str, str]:
        """Return a stack's outputs keyed by OutputKey."""
        try:
            resp = self.client.describe_stacks(StackName=name)
        except ClientError as e:
            raise StackError(f"describe stack {name}", e) from e
        stacks = resp.get("Stacks", [])
        if not stacks:
            return {}
        return {o["OutputKey"]: o["OutputValue"] for o in stacks[0].get("Outputs", [])}

    def _exists(self, name: str) -> bool:
        try:
            self.client.describe_stacks(StackName=name)
        except ClientError as e:
            if "does not exist" in str(e):
                return False
            raise StackError(f"describe stack {name}", e) from e
        return True

    def _parameters(self, stack: StackConfig) -> List[Dict[str, str]]:
        """Only pass parameters the template declares; CloudFormation rejects the rest."""
        if not stack.parameters:
            return []
        try:
            summary = self.client.get_template_summary(TemplateBody=stack.template_body)
        except ClientError as e:
            raise StackError(f"read template parameters for stack {stack.name}", e) from e
        declared = {p["ParameterKey"] for p in summary.get("Parameters", [])}
        return [
            {"ParameterKey": k, "ParameterValue": v}
            for k, v in sorted(stack.parameters.items())
            if k in declared
        ]

    def _wait(self, waiter_name: str, stack_name: str) -> None:
        try:
            self.client.get_waiter(waiter_name).wait(
                StackName=stack_name,
                WaiterConfig={"Delay": 10, "MaxAttempts": 360},
            )
        except WaiterError as e:
            raise StackError(f"wait for stack {stack_name}", e) from e
