"""
Local workspace: the stratus/ directory holding environment and workload manifests.

Layout:

    stratus/.workspace                      application: <app>
    stratus/environments/<env>/manifest.yml
    stratus/<workload>/manifest.yml
    stratus/.../stack.yml                   pre-rendered CloudFormation template
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol

import yaml

from .errors import WorkspaceError
from .settings import WORKSPACE_DIR_NAME, get_workspace_override

SUMMARY_FILE = ".workspace"
ENVIRONMENTS_DIR = "environments"
MANIFEST_FILE = "manifest.yml"
TEMPLATE_FILE = "stack.yml"


class WorkloadManifest:
    """Raw manifest bytes for a workload, parsed lazily."""

    def __init__(self, raw: bytes):
        self.raw = raw

    def workload_type(self) -> str:
        """
        Return the manifest's declared ``type``.

        Raises:
            ValueError: If the manifest is not valid YAML or has no type
        """
        try:
            data = yaml.safe_load(self.raw)
        except yaml.YAMLError as e:
            raise ValueError(f"unmarshal manifest: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("manifest is not a YAML mapping")
        wl_type = data.get("type")
        if not isinstance(wl_type, str) or not wl_type.strip():
            raise ValueError('manifest does not declare a "type"')
        return wl_type.strip()


class WorkspaceReader(Protocol):
    def list_environments(self) -> List[str]: ...

    def read_workload_manifest(self, name: str) -> WorkloadManifest: ...


class Workspace:
    """Reads declarations from a stratus/ directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.dir = self.root / WORKSPACE_DIR_NAME

    @classmethod
    def use(cls, start: Optional[Path] = None) -> "Workspace":
        """
        Locate the workspace from STRATUS_WORKSPACE or by walking up from ``start``.

        Raises:
            WorkspaceError: If no stratus/ directory is found
        """
        override = get_workspace_override()
        if override is not None:
            if not (override / WORKSPACE_DIR_NAME).is_dir():
                raise WorkspaceError(f"no {WORKSPACE_DIR_NAME}/ directory in {override}")
            return cls(override)

        current = Path(start or Path.cwd()).resolve()
        for candidate in [current, *current.parents]:
            if (candidate / WORKSPACE_DIR_NAME).is_dir():
                return cls(candidate)
        raise WorkspaceError(f"couldn't find a {WORKSPACE_DIR_NAME}/ directory in {current} or its parents")

    def app_name(self) -> Optional[str]:
        """Return the application recorded in the workspace summary, if any."""
        summary = self.dir / SUMMARY_FILE
        if not summary.is_file():
            return None
        try:
            data = yaml.safe_load(summary.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise WorkspaceError(f"read workspace summary {summary}", e) from e
        name = data.get("application") if isinstance(data, dict) else None
        return name or None

    def list_environments(self) -> List[str]:
        env_dir = self.dir / ENVIRONMENTS_DIR
        if not env_dir.is_dir():
            return []
        return sorted(p.name for p in env_dir.iterdir() if (p / MANIFEST_FILE).is_file())

    def list_workloads(self) -> List[str]:
        names = []
        for p in self.dir.iterdir():
            if not p.is_dir() or p.name.startswith(".") or p.name == ENVIRONMENTS_DIR:
                continue
            if (p / MANIFEST_FILE).is_file():
                names.append(p.name)
        return sorted(names)

    def read_workload_manifest(self, name: str) -> WorkloadManifest:
        path = self.dir / name / MANIFEST_FILE
        if not path.is_file():
            raise WorkspaceError(f"manifest for workload {name} not found at {path}")
        return WorkloadManifest(self._read_bytes(path))

    def read_environment_manifest(self, env: str) -> bytes:
        path = self.dir / ENVIRONMENTS_DIR / env / MANIFEST_FILE
        if not path.is_file():
            raise WorkspaceError(f"manifest for environment {env} not found at {path}")
        return self._read_bytes(path)

    def read_workload_template(self, name: str) -> str:
        return self._read_template(self.dir / name / TEMPLATE_FILE)

    def read_environment_template(self, env: str) -> str:
        return self._read_template(self.dir / ENVIRONMENTS_DIR / env / TEMPLATE_FILE)

    def _read_template(self, path: Path) -> str:
        if not path.is_file():
            raise WorkspaceError(f"no rendered stack template at {path}")
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"read {path}", e) from e

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise WorkspaceError(f"read {path}", e) from e
