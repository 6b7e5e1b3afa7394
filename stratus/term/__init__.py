"""
Terminal interaction: confirmation prompts and interactive selectors.
"""

from .prompt import ClickPrompter, Option, Prompter
from .selector import Selector, WorkspaceSelector

__all__ = ["ClickPrompter", "Option", "Prompter", "Selector", "WorkspaceSelector"]
