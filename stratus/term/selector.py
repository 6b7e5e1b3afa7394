"""
Interactive selection of workloads and environments.
"""

import logging
from typing import List, Protocol

import click

from ..errors import SelectionError
from .prompt import Option

logger = logging.getLogger(__name__)


class Selector(Protocol):
    def workload(self, prompt: str, help: str) -> str: ...

    def environment(self, prompt: str, help: str, app: str, *extra_options: Option) -> str: ...


class WorkspaceSelector:
    """Chooses workloads from the local workspace and environments from the store."""

    def __init__(self, store, ws):
        self.store = store
        self.ws = ws

    def workload(self, prompt: str, help: str) -> str:
        names = self.ws.list_workloads()
        if not names:
            raise SelectionError("no services or jobs found in the workspace")
        if len(names) == 1:
            logger.info(f"Only found one service or job, defaulting to: {names[0]}")
            return names[0]
        return _choose(prompt, help, [Option(n) for n in names])

    def environment(self, prompt: str, help: str, app: str, *extra_options: Option) -> str:
        options = [Option(env.name) for env in self.store.list_environments(app)]
        seen = {o.value for o in options}
        options.extend(o for o in extra_options if o.value not in seen)
        if not options:
            raise SelectionError(f"no environments found in application {app}")
        if len(options) == 1:
            logger.info(f"Only found one environment, defaulting to: {options[0].value}")
            return options[0].value
        return _choose(prompt, help, options)


def _choose(prompt: str, help: str, options: List[Option]) -> str:
    if help:
        click.secho(help, dim=True, err=True)
    for i, option in enumerate(options, start=1):
        click.echo(f"  {i}. {option.label}", err=True)
    values = [o.value for o in options]
    return click.prompt(prompt, type=click.Choice(values), show_choices=False, err=True)
