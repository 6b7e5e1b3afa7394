"""
Records held by the application store.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class Environment:
    """An environment registered under an application."""
    app: str
    name: str
    region: Optional[str] = None
    account_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Environment":
        return cls(
            app=data["app"],
            name=data["name"],
            region=data.get("region"),
            account_id=data.get("account_id"),
        )


@dataclass
class Workload:
    """A service or job registered under an application."""
    app: str
    name: str
    type: str  # one of manifestinfo.WORKLOAD_TYPES

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workload":
        return cls(app=data["app"], name=data["name"], type=data["type"])
