"""
Tests for the environment and workload lifecycle commands.
"""

import pytest
from botocore.exceptions import ClientError
from unittest.mock import Mock

from stratus.cloudformation import STACK_CREATED
from stratus.commands import (
    DeployEnvCommand,
    DeployJobCommand,
    DeploySvcCommand,
    InitEnvCommand,
    WorkloadInitializer,
)
from stratus.errors import IdentityError, NoSuchEnvironmentError, WorkspaceError
from stratus.lifecycle import ACTION_STAGES, run_stages
from stratus.store.models import Environment, Workload
from stratus.tags import APP_TAG, WORKLOAD_TAG
from stratus.workspace import WorkloadManifest


def make_session(account="123456789012", region="us-west-2"):
    session = Mock()
    session.region_name = region
    session.client.return_value.get_caller_identity.return_value = {"Account": account}
    return session


class TestInitEnvCommand:
    def test_registers_environment(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        store = Mock()
        store.get_environment.side_effect = NoSuchEnvironmentError("app", "test")
        cmd = InitEnvCommand("app", "test", store, make_session())

        run_stages(cmd)

        store.create_environment.assert_called_once_with(
            Environment("app", "test", "us-west-2", "123456789012")
        )

    def test_explicit_region_wins(self):
        store = Mock()
        store.get_environment.side_effect = NoSuchEnvironmentError("app", "test")
        cmd = InitEnvCommand("app", "test", store, make_session(), region="eu-west-1")

        run_stages(cmd)

        assert store.create_environment.call_args[0][0].region == "eu-west-1"

    @pytest.mark.parametrize("name", ["Test", "1env", "", "has_underscore"])
    def test_invalid_names(self, name):
        cmd = InitEnvCommand("app", name, Mock(), make_session())
        with pytest.raises(ValueError, match="is invalid"):
            cmd.validate()

    def test_existing_environment_rejected(self):
        store = Mock()
        store.get_environment.return_value = Environment("app", "test")
        cmd = InitEnvCommand("app", "test", store, make_session())
        with pytest.raises(ValueError, match="already exists"):
            cmd.validate()

    def test_expired_credentials(self):
        """STS failures become a tagged error and nothing is registered."""
        store = Mock()
        store.get_environment.side_effect = NoSuchEnvironmentError("app", "test")
        session = make_session()
        session.client.return_value.get_caller_identity.side_effect = ClientError(
            {"Error": {"Code": "ExpiredToken", "Message": "expired"}}, "GetCallerIdentity"
        )
        cmd = InitEnvCommand("app", "test", store, session, region="us-west-2")

        with pytest.raises(IdentityError, match=r"^get caller identity: .*ExpiredToken"):
            run_stages(cmd)
        store.create_environment.assert_not_called()

    def test_missing_region(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        cmd = InitEnvCommand("app", "test", Mock(), make_session(region=None))
        with pytest.raises(ValueError, match="no region configured"):
            cmd.ask()


class TestDeployEnvCommand:
    def test_deploys_environment_stack(self):
        ws = Mock()
        ws.read_environment_template.return_value = "Resources: {}"
        deployer = Mock()
        cmd = DeployEnvCommand("app", "test", Mock(), ws, deployer,
                               resource_tags={"owner": "me"}, detach=True)

        run_stages(cmd)

        stack = deployer.deploy.call_args[0][0]
        assert stack.name == "app-test"
        assert stack.template_body == "Resources: {}"
        assert stack.parameters == {"AppName": "app", "EnvironmentName": "test"}
        assert stack.tags["owner"] == "me"
        assert deployer.deploy.call_args[1] == {"wait": False}

    def test_force_adds_update_id(self):
        ws = Mock()
        deployer = Mock()
        cmd = DeployEnvCommand("app", "test", Mock(), ws, deployer, force_new_update=True)

        run_stages(cmd)

        assert "ForceUpdateID" in deployer.deploy.call_args[0][0].parameters

    def test_missing_manifest_fails_in_ask(self):
        ws = Mock()
        ws.read_environment_manifest.side_effect = WorkspaceError("no manifest")
        deployer = Mock()
        cmd = DeployEnvCommand("app", "test", Mock(), ws, deployer)

        with pytest.raises(WorkspaceError):
            run_stages(cmd)
        deployer.deploy.assert_not_called()

    def test_reserved_resource_tag_fails_validation(self):
        cmd = DeployEnvCommand("app", "test", Mock(), Mock(), Mock(), resource_tags={APP_TAG: "x"})
        with pytest.raises(ValueError, match="reserved"):
            cmd.validate()


def workload_ws(wl_type):
    ws = Mock()
    ws.read_workload_manifest.return_value = WorkloadManifest(f"type: {wl_type}\n".encode())
    ws.read_workload_template.return_value = "Resources: {}"
    return ws


class TestDeployWorkloadCommands:
    def test_service_deploy(self):
        deployer = Mock()
        deployer.deploy.return_value = STACK_CREATED
        deployer.outputs.return_value = {"URL": "https://fe.example.com"}
        cmd = DeploySvcCommand("app", "test", "fe", Mock(), workload_ws("Load Balanced Web Service"), deployer,
                               image_tag="v1")

        run_stages(cmd, ACTION_STAGES)

        stack = deployer.deploy.call_args[0][0]
        assert stack.name == "app-test-fe"
        assert stack.parameters["ImageTag"] == "v1"
        assert stack.tags[WORKLOAD_TAG] == "fe"
        assert cmd.result == STACK_CREATED
        deployer.outputs.assert_called_once_with("app-test-fe")

    def test_service_detached_skips_outputs(self):
        deployer = Mock()
        cmd = DeploySvcCommand("app", "test", "fe", Mock(), workload_ws("Backend Service"), deployer, detach=True)

        run_stages(cmd, ACTION_STAGES)

        assert deployer.deploy.call_args[1] == {"wait": False}
        deployer.outputs.assert_not_called()

    def test_job_deploy(self):
        deployer = Mock()
        cmd = DeployJobCommand("app", "test", "mailer", Mock(), workload_ws("Scheduled Job"), deployer)

        run_stages(cmd, ACTION_STAGES)

        assert deployer.deploy.call_args[0][0].name == "app-test-mailer"
        assert "ImageTag" not in deployer.deploy.call_args[0][0].parameters

    def test_service_command_rejects_job_manifest(self):
        cmd = DeploySvcCommand("app", "test", "mailer", Mock(), workload_ws("Scheduled Job"), Mock())
        with pytest.raises(ValueError, match="not a service"):
            cmd.ask()

    def test_job_command_rejects_service_manifest(self):
        cmd = DeployJobCommand("app", "test", "fe", Mock(), workload_ws("Worker Service"), Mock())
        with pytest.raises(ValueError, match="not a job"):
            cmd.ask()

    def test_invalid_image_tag(self):
        cmd = DeploySvcCommand("app", "test", "fe", Mock(), Mock(), Mock(), image_tag="bad tag")
        with pytest.raises(ValueError, match="image tag"):
            cmd.validate()

    def test_missing_environment_fails_in_ask(self):
        store = Mock()
        store.get_environment.side_effect = NoSuchEnvironmentError("app", "test")
        cmd = DeploySvcCommand("app", "test", "fe", store, workload_ws("Backend Service"), Mock())
        with pytest.raises(NoSuchEnvironmentError):
            cmd.ask()


class TestWorkloadInitializer:
    def test_adds_workload(self):
        store = Mock()
        WorkloadInitializer(store).add_workload_to_app("app", "fe", "Backend Service")
        store.create_workload.assert_called_once_with(Workload("app", "fe", "Backend Service"))
