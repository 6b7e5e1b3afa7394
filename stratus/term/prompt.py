"""
Confirmation prompts on top of click.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import click


@dataclass(frozen=True)
class Option:
    """A selectable value with an optional hint shown next to it."""
    value: str
    hint: str = ""

    @property
    def label(self) -> str:
        return f"{self.value} ({self.hint})" if self.hint else self.value


class Prompter(Protocol):
    def confirm(self, message: str, help: str = "", final_message: Optional[str] = None) -> bool: ...


class ClickPrompter:
    """Asks yes/no questions on stderr so stdout stays clean for output."""

    def __init__(self, default: bool = False):
        self.default = default

    def confirm(self, message: str, help: str = "", final_message: Optional[str] = None) -> bool:
        if help:
            click.secho(help, dim=True, err=True)
        try:
            answer = click.confirm(message, default=self.default, err=True)
        except click.Abort as e:
            # Ctrl+C or closed stdin; click leaves the message empty.
            raise click.Abort("prompt aborted") from e
        if final_message:
            click.echo(f"{final_message} {'Yes' if answer else 'No'}", err=True)
        return answer
