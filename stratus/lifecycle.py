"""
Lifecycle command contract shared by environment and workload sub-commands.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Sequence

from .errors import StageError


class Stage(Enum):
    """Command stages, in the only order they may run."""
    VALIDATE = "validate"
    ASK = "ask"
    EXECUTE = "execute"
    RECOMMEND_ACTIONS = "recommend"


COMMAND_STAGES = (Stage.VALIDATE, Stage.ASK, Stage.EXECUTE)
ACTION_STAGES = COMMAND_STAGES + (Stage.RECOMMEND_ACTIONS,)

_METHODS = {
    Stage.VALIDATE: "validate",
    Stage.ASK: "ask",
    Stage.EXECUTE: "execute",
    Stage.RECOMMEND_ACTIONS: "recommend_actions",
}


class Command(ABC):
    """A unit of work run as validate -> ask -> execute."""

    @abstractmethod
    def validate(self) -> None:
        """Check flag values before asking for anything."""

    @abstractmethod
    def ask(self) -> None:
        """Prompt for whatever is still missing."""

    @abstractmethod
    def execute(self) -> None:
        """Perform the action."""


class ActionCommand(Command):
    """A command that also suggests follow-up actions once it succeeds."""

    @abstractmethod
    def recommend_actions(self) -> None:
        pass


def run_stages(cmd: Command, stages: Sequence[Stage] = COMMAND_STAGES, label: Optional[str] = None) -> None:
    """
    Run a command's stages in order, stopping at the first failure.

    Args:
        cmd: Command to drive
        stages: COMMAND_STAGES or ACTION_STAGES
        label: When given, failures are raised as StageError("<stage> <label>", cause);
            otherwise they propagate untouched

    Raises:
        ValueError: If ``stages`` skips or reorders a stage
    """
    stages = tuple(stages)
    if stages not in (COMMAND_STAGES, ACTION_STAGES):
        raise ValueError(f"invalid stage sequence: {[s.value for s in stages]}")

    for stage in stages:
        method = getattr(cmd, _METHODS[stage])
        if label is None:
            method()
            continue
        try:
            method()
        except Exception as e:
            raise StageError(f"{stage.value} {label}", e) from e
