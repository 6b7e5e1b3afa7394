"""
Deploy controller.

Decides whether the target environment and each workload must be initialized
before deploying, asks the user when intent is unspecified, and then drives
every workload's deploy command through validate -> ask -> execute -> recommend.
The first failure aborts the run; workloads deployed before it stay deployed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .errors import (
    CommandSetupError,
    EnvironmentNotDeployed,
    EnvironmentNotInApp,
    EnvironmentUnresolvable,
    NoSuchEnvironmentError,
    PromptError,
    SelectionError,
    StoreError,
    UnrecognizedWorkloadType,
    WorkloadNotInitialized,
    WorkspaceError,
)
from .lifecycle import ACTION_STAGES, ActionCommand, Command, run_stages
from .manifestinfo import JOB_FAMILY, classify_workload, is_known
from .term.prompt import Option
from .tristate import TriState

logger = logging.getLogger(__name__)

INIT_WORKLOAD_FLAG = "init-wkld"
INIT_ENV_FLAG = "init-env"
DEPLOY_ENV_FLAG = "deploy-env"


@dataclass
class DeployRequest:
    """Everything one ``stratus deploy`` invocation asks for."""
    app_name: str
    env_name: str = ""
    workload_names: List[str] = field(default_factory=list)

    init_workload: TriState = TriState.UNSET
    init_env: TriState = TriState.UNSET
    deploy_env: TriState = TriState.UNSET

    # Passed through to the deploy sub-commands.
    image_tag: Optional[str] = None
    resource_tags: Dict[str, str] = field(default_factory=dict)
    force_new_update: bool = False
    disable_rollback: bool = False
    detach: bool = False
    region: Optional[str] = None
    profile: Optional[str] = None

    def __post_init__(self):
        if not self.app_name:
            raise ValueError("application name is required")


class DeployController:
    """
    Runs one deploy request. Not reusable across requests.

    Args:
        request: The request; tri-state flags and names are filled in as the run resolves them
        store: Remote registry of environments and workloads
        ws: Local workspace
        sel: Interactive workload/environment selector
        prompt: Yes/no prompter
        workload_adder: Registers an uninitialized workload with the application
        new_init_env_cmd: Builds the environment init command
        new_deploy_env_cmd: Builds the environment deploy command
        new_svc_deploy_cmd: Builds a service deploy command for a workload name
        new_job_deploy_cmd: Builds a job deploy command for a workload name
    """

    def __init__(
        self,
        request: DeployRequest,
        store,
        ws,
        sel,
        prompt,
        workload_adder,
        new_init_env_cmd: Callable[[DeployRequest], Command],
        new_deploy_env_cmd: Callable[[DeployRequest], Command],
        new_svc_deploy_cmd: Callable[[DeployRequest, str], ActionCommand],
        new_job_deploy_cmd: Callable[[DeployRequest, str], ActionCommand],
    ):
        self.request = request
        self.store = store
        self.ws = ws
        self.sel = sel
        self.prompt = prompt
        self.workload_adder = workload_adder
        self.new_init_env_cmd = new_init_env_cmd
        self.new_deploy_env_cmd = new_deploy_env_cmd
        self.new_svc_deploy_cmd = new_svc_deploy_cmd
        self.new_job_deploy_cmd = new_job_deploy_cmd

        # Family of the workload currently being deployed, for error tags.
        self.wl_family: Optional[str] = None

        self.env_exists_in_app = False
        self.env_exists_in_ws = False

        self._ws_environments: Optional[List[str]] = None

    def run(self) -> None:
        self.ask_names()
        self.ask_env()
        self.check_env_exists()
        self.maybe_init_env()
        self.maybe_deploy_env()

        for name in self.request.workload_names:
            self.maybe_init_workload(name)
            cmd = self.load_workload_command(name)
            run_stages(cmd, ACTION_STAGES, label=f"{self.wl_family} deploy")

    # Request resolution

    def ask_names(self) -> None:
        # An explicitly empty list means nothing was chosen yet, so we ask.
        if self.request.workload_names:
            return
        try:
            name = self.sel.workload("Select a service or job in your workspace", "")
        except Exception as e:
            raise SelectionError("select service or job", e) from e
        self.request.workload_names = [name]

    def ask_env(self) -> None:
        if self.request.env_name:
            return
        try:
            local_envs = self._list_ws_environments()
        except Exception as e:
            raise WorkspaceError("get workspace environments", e) from e
        try:
            initialized = self.store.list_environments(self.request.app_name)
        except Exception as e:
            raise StoreError("get initialized environments", e) from e

        initialized_names = {env.name for env in initialized}
        extra_options = [
            Option(value=env, hint="uninitialized")
            for env in local_envs
            if env not in initialized_names
        ]
        try:
            self.request.env_name = self.sel.environment(
                "Select an environment to deploy to", "", self.request.app_name, *extra_options
            )
        except Exception as e:
            raise SelectionError("get environment name", e) from e

    def _list_ws_environments(self) -> List[str]:
        if self._ws_environments is None:
            self._ws_environments = list(self.ws.list_environments() or [])
        return self._ws_environments

    # Environment

    def check_env_exists(self) -> None:
        """Record whether the environment is registered in the app and declared in the workspace."""
        app, env = self.request.app_name, self.request.env_name
        try:
            self.store.get_environment(app, env)
            self.env_exists_in_app = True
        except NoSuchEnvironmentError:
            self.env_exists_in_app = False
        except Exception as e:
            raise StoreError("get environment from config store", e) from e

        try:
            self.env_exists_in_ws = env in self._list_ws_environments()
        except Exception as e:
            raise WorkspaceError("list environments in workspace", e) from e

        in_app, in_ws = self.env_exists_in_app, self.env_exists_in_ws
        if not in_app and not in_ws:
            logger.error(
                f'Environment "{env}" does not exist in the current application or workspace. '
                "Please initialize it by running `stratus env init`."
            )
            raise EnvironmentUnresolvable(f'environment "{env}" does not exist in the workspace')
        if in_app and not in_ws:
            logger.info(
                f'Manifest for environment "{env}" does not exist in the current workspace. '
                f"To deploy this environment, add a manifest at stratus/environments/{env}/manifest.yml."
            )
        # in_ws without in_app is handled by maybe_init_env; both present needs nothing.

    def maybe_init_env(self) -> None:
        if self.env_exists_in_app:
            return

        req = self.request
        if not req.init_env.is_set:
            try:
                confirmed = self.prompt.confirm(
                    f'Environment "{req.env_name}" does not exist in app "{req.app_name}". Initialize it?', ""
                )
            except Exception as e:
                raise PromptError("confirm env init", e) from e
            req.init_env = TriState.of(confirmed)

        if not req.init_env:
            logger.error(
                f'Environment "{req.env_name}" does not exist in application "{req.app_name}" '
                "and was not initialized after prompting."
            )
            raise EnvironmentNotInApp(f"env {req.env_name} does not exist in app {req.app_name}")

        try:
            cmd = self.new_init_env_cmd(req)
        except Exception as e:
            raise CommandSetupError("load env init command", e) from e
        run_stages(cmd)

        if not req.deploy_env.is_set:
            logger.info(f'Environment "{req.env_name}" was just initialized. We\'ll deploy it now.')
            req.deploy_env = TriState.TRUE
        elif not req.deploy_env:
            logger.error(
                f"Environment is not deployed but --{DEPLOY_ENV_FLAG}=false was specified. "
                "Deploy the environment with `stratus env deploy` in order to deploy a workload to it."
            )
            raise EnvironmentNotDeployed(f"environment {req.env_name} was initialized but has not been deployed")

    def maybe_deploy_env(self) -> None:
        # Without a local manifest there is nothing to deploy the environment from.
        if not self.env_exists_in_ws:
            return
        if not self.request.deploy_env:
            return
        try:
            cmd = self.new_deploy_env_cmd(self.request)
        except Exception as e:
            raise CommandSetupError("set up env deploy command", e) from e
        run_stages(cmd)

    # Workloads

    def maybe_init_workload(self, name: str) -> None:
        req = self.request
        try:
            initialized = self.store.list_workloads(req.app_name)
        except Exception as e:
            raise StoreError("retrieve workloads", e) from e

        if name in {wl.name for wl in initialized}:
            return

        try:
            mf = self.ws.read_workload_manifest(name)
        except Exception as e:
            raise WorkspaceError(f"read manifest for workload {name}", e) from e
        try:
            wl_type = mf.workload_type()
        except Exception as e:
            raise WorkspaceError(f"get workload type from manifest for workload {name}", e) from e
        if not is_known(wl_type):
            raise UnrecognizedWorkloadType(wl_type, name)

        # One answer covers every workload in this run.
        if not req.init_workload.is_set:
            try:
                confirmed = self.prompt.confirm(
                    f'Found manifest for uninitialized {wl_type} "{name}". Initialize it?',
                    "This workload will be initialized, then deployed.",
                    final_message=f"Initialize {wl_type}:",
                )
            except Exception as e:
                raise PromptError("confirm initialize workload", e) from e
            req.init_workload = TriState.of(confirmed)

        if not req.init_workload:
            raise WorkloadNotInitialized(
                f"workload {name} is uninitialized but --{INIT_WORKLOAD_FLAG}=false was specified"
            )

        try:
            self.workload_adder.add_workload_to_app(req.app_name, name, wl_type)
        except Exception as e:
            raise StoreError("add workload to app", e) from e

    def load_workload_command(self, name: str) -> ActionCommand:
        """Build the deploy command for a registered workload and record its family."""
        app = self.request.app_name
        try:
            wl = self.store.get_workload(app, name)
        except Exception as e:
            raise StoreError(f"retrieve {name} from application {app}", e) from e

        family = classify_workload(wl.type)
        factory = self.new_job_deploy_cmd if family == JOB_FAMILY else self.new_svc_deploy_cmd
        cmd = factory(self.request, name)
        self.wl_family = family
        return cmd
