"""
Click CLI interface for stratus.
"""

import logging
from typing import Optional

import boto3
import click
from botocore.exceptions import BotoCoreError

from .cloudformation import StackDeployer
from .commands import DeployEnvCommand, DeployJobCommand, DeploySvcCommand, InitEnvCommand, WorkloadInitializer
from .deploy import DeployController, DeployRequest
from .errors import StratusError
from .lifecycle import run_stages
from .settings import get_default_region, get_log_level
from .store import SSMStore
from .tags import parse_user_tags
from .term import ClickPrompter, WorkspaceSelector
from .tristate import TriState
from .workspace import Workspace

logger = logging.getLogger(__name__)


class Clients:
    """AWS clients and local collaborators shared by the commands of one invocation."""

    def __init__(self, profile: Optional[str] = None, region: Optional[str] = None):
        self.session = boto3.session.Session(profile_name=profile, region_name=region or get_default_region())
        self.store = SSMStore(client=self.session.client("ssm"))
        self.deployer = StackDeployer(client=self.session.client("cloudformation"))
        self._ws: Optional[Workspace] = None

    @property
    def ws(self) -> Workspace:
        if self._ws is None:
            self._ws = Workspace.use()
        return self._ws


def new_deploy_controller(request: DeployRequest, clients: Clients) -> DeployController:
    """Wire the deploy controller to the real store, workspace and terminal."""
    store, ws, deployer = clients.store, clients.ws, clients.deployer

    def new_init_env_cmd(req: DeployRequest) -> InitEnvCommand:
        return InitEnvCommand(req.app_name, req.env_name, store, clients.session, region=req.region)

    def new_deploy_env_cmd(req: DeployRequest) -> DeployEnvCommand:
        return DeployEnvCommand(
            req.app_name, req.env_name, store, ws, deployer,
            resource_tags=req.resource_tags,
            force_new_update=req.force_new_update,
            disable_rollback=req.disable_rollback,
            detach=req.detach,
        )

    def workload_cmd_factory(cls):
        def factory(req: DeployRequest, name: str):
            return cls(
                req.app_name, req.env_name, name, store, ws, deployer,
                image_tag=req.image_tag,
                resource_tags=req.resource_tags,
                force_new_update=req.force_new_update,
                disable_rollback=req.disable_rollback,
                detach=req.detach,
            )
        return factory

    return DeployController(
        request,
        store=store,
        ws=ws,
        sel=WorkspaceSelector(store, ws),
        prompt=ClickPrompter(),
        workload_adder=WorkloadInitializer(store),
        new_init_env_cmd=new_init_env_cmd,
        new_deploy_env_cmd=new_deploy_env_cmd,
        new_svc_deploy_cmd=workload_cmd_factory(DeploySvcCommand),
        new_job_deploy_cmd=workload_cmd_factory(DeployJobCommand),
    )


def _resolve_app(app: Optional[str], clients: Clients) -> str:
    if app:
        return app
    try:
        name = clients.ws.app_name()
    except StratusError as e:
        raise click.UsageError(f"no application found: pass --app or run inside a workspace ({e})") from e
    if not name:
        raise click.UsageError("no application found: pass --app or run inside a workspace")
    return name


def _run(fn) -> None:
    """Run fn, turning stratus and AWS errors into a clean CLI failure."""
    try:
        fn()
    except (StratusError, ValueError, OSError, BotoCoreError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose):
    """
    Stratus - deploy services and jobs into application environments.
    """
    logging.basicConfig(level=get_log_level(verbose), format="%(message)s")
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


@main.command("deploy")
@click.option("--app", "-a", help="Name of the application")
@click.option("--name", "-n", "names", multiple=True, help="Name of the service or job (repeatable)")
@click.option("--env", "-e", "env", default="", help="Name of the environment")
@click.option("--tag", "image_tag", help="Container image tag")
@click.option("--resource-tags", multiple=True, help="Resource tags in format 'key=value' (repeatable)")
@click.option("--force", is_flag=True, help="Force a new deployment even if nothing changed")
@click.option("--no-rollback", is_flag=True, help="Disable automatic stack rollback on failure")
@click.option("--detach", is_flag=True, help="Don't wait for stacks to finish deploying")
@click.option("--init-wkld/--no-init-wkld", "init_wkld", default=None,
              help="Initialize the workload if it is not yet registered")
@click.option("--init-env/--no-init-env", "init_env", default=None,
              help="Initialize the environment if it is not yet registered")
@click.option("--deploy-env/--no-deploy-env", "deploy_env", default=None,
              help="Deploy the target environment before the workload")
@click.option("--region", help="AWS region for a newly initialized environment")
@click.option("--profile", help="AWS named profile")
def deploy_cmd(app, names, env, image_tag, resource_tags, force, no_rollback, detach,
               init_wkld, init_env, deploy_env, region, profile):
    """
    Deploy a service or job, initializing its environment first if needed.
    """
    try:
        user_tags = parse_user_tags(list(resource_tags))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--resource-tags")

    def run():
        clients = Clients(profile=profile, region=region)
        request = DeployRequest(
            app_name=_resolve_app(app, clients),
            env_name=env,
            workload_names=list(names),
            init_workload=TriState.from_optional(init_wkld),
            init_env=TriState.from_optional(init_env),
            deploy_env=TriState.from_optional(deploy_env),
            image_tag=image_tag,
            resource_tags=user_tags,
            force_new_update=force,
            disable_rollback=no_rollback,
            detach=detach,
            region=region,
            profile=profile,
        )
        new_deploy_controller(request, clients).run()

    _run(run)


@main.group()
def env():
    """Manage environments."""
    pass


@env.command("init")
@click.option("--app", "-a", help="Name of the application")
@click.option("--name", "-n", required=True, help="Name of the environment")
@click.option("--region", help="AWS region for the environment")
@click.option("--profile", help="AWS named profile")
def env_init_cmd(app, name, region, profile):
    """Register an environment with the application."""
    def run():
        clients = Clients(profile=profile, region=region)
        cmd = InitEnvCommand(_resolve_app(app, clients), name, clients.store, clients.session, region=region)
        run_stages(cmd)

    _run(run)


@env.command("deploy")
@click.option("--app", "-a", help="Name of the application")
@click.option("--name", "-n", required=True, help="Name of the environment")
@click.option("--resource-tags", multiple=True, help="Resource tags in format 'key=value' (repeatable)")
@click.option("--force", is_flag=True, help="Force a new deployment even if nothing changed")
@click.option("--no-rollback", is_flag=True, help="Disable automatic stack rollback on failure")
@click.option("--detach", is_flag=True, help="Don't wait for the stack to finish deploying")
@click.option("--profile", help="AWS named profile")
def env_deploy_cmd(app, name, resource_tags, force, no_rollback, detach, profile):
    """Deploy an environment from its workspace manifest."""
    try:
        user_tags = parse_user_tags(list(resource_tags))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--resource-tags")

    def run():
        clients = Clients(profile=profile)
        cmd = DeployEnvCommand(
            _resolve_app(app, clients), name, clients.store, clients.ws, clients.deployer,
            resource_tags=user_tags,
            force_new_update=force,
            disable_rollback=no_rollback,
            detach=detach,
        )
        run_stages(cmd)

    _run(run)


if __name__ == "__main__":
    main()
