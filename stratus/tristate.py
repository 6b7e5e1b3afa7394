"""
Three-valued user intent flags.
"""

from enum import Enum
from typing import Optional


class TriState(Enum):
    """A flag that is either left to the user (UNSET) or forced on/off."""
    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_optional(cls, value: Optional[bool]) -> "TriState":
        """Map a click ``--x/--no-x`` flag (None when absent) to a TriState."""
        if value is None:
            return cls.UNSET
        return cls.TRUE if value else cls.FALSE

    @classmethod
    def of(cls, value: bool) -> "TriState":
        return cls.TRUE if value else cls.FALSE

    @property
    def is_set(self) -> bool:
        return self is not TriState.UNSET

    def __bool__(self) -> bool:
        # UNSET reads as false, matching an unanswered "yes" question.
        return self is TriState.TRUE
