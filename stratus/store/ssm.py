"""
Application store backed by SSM Parameter Store.

Records are JSON documents stored as String parameters:

    <prefix>/applications/<app>/environments/<env>
    <prefix>/applications/<app>/components/<name>
"""

import json
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from ..errors import NoSuchEnvironmentError, NoSuchWorkloadError, StoreError
from ..settings import get_ssm_prefix
from .models import Environment, Workload

logger = logging.getLogger(__name__)

PARAMETER_NOT_FOUND = "ParameterNotFound"
PARAMETER_ALREADY_EXISTS = "ParameterAlreadyExists"


def _error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "")


class SSMStore:
    """Reads and writes environment and workload records in SSM."""

    def __init__(self, client=None, region: Optional[str] = None, prefix: Optional[str] = None):
        self.client = client or boto3.client("ssm", region_name=region)
        self.prefix = prefix or get_ssm_prefix()

    # Paths

    def _app_path(self, app: str) -> str:
        return f"{self.prefix}/applications/{app}"

    def _env_path(self, app: str, env: str = "") -> str:
        return f"{self._app_path(app)}/environments/{env}".rstrip("/")

    def _workload_path(self, app: str, name: str = "") -> str:
        return f"{self._app_path(app)}/components/{name}".rstrip("/")

    # Environments

    def get_environment(self, app: str, env: str) -> Environment:
        """
        Get a registered environment.

        Raises:
            NoSuchEnvironmentError: If the environment is not registered
            StoreError: For any other SSM failure
        """
        try:
            data = self._get_record(self._env_path(app, env))
        except ClientError as e:
            if _error_code(e) == PARAMETER_NOT_FOUND:
                raise NoSuchEnvironmentError(app, env) from e
            raise StoreError(f"get environment {env} in application {app}", e) from e
        return Environment.from_dict(data)

    def list_environments(self, app: str) -> List[Environment]:
        try:
            records = self._list_records(self._env_path(app))
        except ClientError as e:
            raise StoreError(f"list environments in application {app}", e) from e
        return sorted((Environment.from_dict(r) for r in records), key=lambda e: e.name)

    def create_environment(self, env: Environment) -> None:
        try:
            created = self._put_record(self._env_path(env.app, env.name), env.to_dict())
        except ClientError as e:
            raise StoreError(f"create environment {env.name} in application {env.app}", e) from e
        if not created:
            logger.debug(f"Environment {env.name} already registered in application {env.app}")

    # Workloads

    def get_workload(self, app: str, name: str) -> Workload:
        try:
            data = self._get_record(self._workload_path(app, name))
        except ClientError as e:
            if _error_code(e) == PARAMETER_NOT_FOUND:
                raise NoSuchWorkloadError(app, name) from e
            raise StoreError(f"get workload {name} in application {app}", e) from e
        return Workload.from_dict(data)

    def list_workloads(self, app: str) -> List[Workload]:
        try:
            records = self._list_records(self._workload_path(app))
        except ClientError as e:
            raise StoreError(f"list workloads in application {app}", e) from e
        return sorted((Workload.from_dict(r) for r in records), key=lambda w: w.name)

    def create_workload(self, workload: Workload) -> None:
        try:
            created = self._put_record(self._workload_path(workload.app, workload.name), workload.to_dict())
        except ClientError as e:
            raise StoreError(f"create workload {workload.name} in application {workload.app}", e) from e
        if not created:
            logger.debug(f"Workload {workload.name} already registered in application {workload.app}")

    # SSM helpers

    def _get_record(self, path: str) -> Dict[str, Any]:
        resp = self.client.get_parameter(Name=path)
        return json.loads(resp["Parameter"]["Value"])

    def _list_records(self, path: str) -> List[Dict[str, Any]]:
        records = []
        paginator = self.client.get_paginator("get_parameters_by_path")
        for page in paginator.paginate(Path=path, Recursive=False):
            for param in page.get("Parameters", []):
                records.append(json.loads(param["Value"]))
        return records

    def _put_record(self, path: str, data: Dict[str, Any]) -> bool:
        """Write a record once. Returns False if it already existed."""
        try:
            self.client.put_parameter(
                Name=path,
                Value=json.dumps(data),
                Type="String",
                Overwrite=False,
            )
        except ClientError as e:
            if _error_code(e) == PARAMETER_ALREADY_EXISTS:
                return False
            raise
        return True
