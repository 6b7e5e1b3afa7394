"""
Error taxonomy for the deploy controller.

Every failure surfaced by the controller carries a tag naming the phase that
produced it. Collaborator errors are chained as ``__cause__``.
"""

from typing import Optional


class StratusError(Exception):
    """Base class for all stratus errors."""


class TaggedError(StratusError):
    """An error rendered as ``"<tag>: <cause>"``."""

    def __init__(self, tag: str, cause: Optional[BaseException] = None):
        self.tag = tag
        self.cause = cause
        if cause is None:
            message = tag
        else:
            message = f"{tag}: {str(cause) or type(cause).__name__}"
        super().__init__(message)


class SelectionError(TaggedError):
    """Interactive selection of a workload or environment failed."""


class StoreError(TaggedError):
    """A query or mutation against the remote store failed."""


class NoSuchEnvironmentError(StoreError):
    """The environment is not registered in the application."""

    def __init__(self, app: str, env: str):
        self.app = app
        self.env = env
        super().__init__(f"couldn't find environment {env} in the application {app}")


class NoSuchWorkloadError(StoreError):
    """The workload is not registered in the application."""

    def __init__(self, app: str, name: str):
        self.app = app
        self.name = name
        super().__init__(f"couldn't find {name} in the application {app}")


class WorkspaceError(TaggedError):
    """Reading the local workspace failed."""


class PromptError(TaggedError):
    """A confirmation prompt could not be answered."""


class StageError(TaggedError):
    """A lifecycle command stage failed, e.g. ``ask svc deploy: ...``."""


class CommandSetupError(TaggedError):
    """A sub-command could not be constructed."""


class StackError(TaggedError):
    """Creating or updating a CloudFormation stack failed."""


class IdentityError(TaggedError):
    """The AWS account of the current credentials could not be determined."""


# Policy refusals. These are decisions, not I/O failures.

class EnvironmentUnresolvable(StratusError):
    """The environment exists neither in the application nor in the workspace."""


class EnvironmentNotInApp(StratusError):
    """The environment is not registered and the user declined to initialize it."""


class EnvironmentNotDeployed(StratusError):
    """The environment was just initialized but deploying it was refused."""


class UnrecognizedWorkloadType(StratusError):
    """A manifest declares a workload type outside the known set."""

    def __init__(self, workload_type: str, name: str):
        self.workload_type = workload_type
        self.name = name
        super().__init__(f'unrecognized workload type "{workload_type}" in manifest for workload {name}')


class WorkloadNotInitialized(StratusError):
    """The workload is not registered and initializing it was refused."""
