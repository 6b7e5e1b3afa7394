"""
Tests for stack create/update handling.
"""

from datetime import datetime

import boto3
import pytest
from botocore.stub import Stubber

from stratus.cloudformation import (
    CAPABILITIES,
    STACK_CREATED,
    STACK_UNCHANGED,
    STACK_UPDATED,
    StackConfig,
    StackDeployer,
    env_stack_name,
    workload_stack_name,
)
from stratus.errors import StackError

TEMPLATE = "Parameters:\n  AppName:\n    Type: String\nResources: {}\n"
STACK_ID = "arn:aws:cloudformation:us-west-2:123456789012:stack/app-test/abc"


@pytest.fixture
def cfn():
    client = boto3.client(
        "cloudformation",
        region_name="us-west-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def stack_call(**overrides):
    params = {
        "StackName": "app-test",
        "TemplateBody": TEMPLATE,
        "Parameters": [],
        "Tags": [],
        "Capabilities": CAPABILITIES,
        "DisableRollback": False,
    }
    params.update(overrides)
    return params


def describe_ok(name="app-test", outputs=None):
    stack = {
        "StackName": name,
        "StackId": STACK_ID,
        "CreationTime": datetime(2024, 1, 1),
        "StackStatus": "CREATE_COMPLETE",
    }
    if outputs is not None:
        stack["Outputs"] = outputs
    return {"Stacks": [stack]}


class TestStackDeployer:
    def test_creates_missing_stack(self, cfn):
        client, stubber = cfn
        stubber.add_client_error("describe_stacks", service_error_code="ValidationError",
                                 service_message="Stack with id app-test does not exist",
                                 expected_params={"StackName": "app-test"})
        stubber.add_response("create_stack", {"StackId": STACK_ID}, stack_call())

        result = StackDeployer(client=client).deploy(StackConfig("app-test", TEMPLATE), wait=False)

        assert result == STACK_CREATED

    def test_updates_existing_stack(self, cfn):
        client, stubber = cfn
        stubber.add_response("describe_stacks", describe_ok(), {"StackName": "app-test"})
        stubber.add_response("update_stack", {"StackId": STACK_ID}, stack_call(DisableRollback=True))

        result = StackDeployer(client=client).deploy(
            StackConfig("app-test", TEMPLATE, disable_rollback=True), wait=False
        )

        assert result == STACK_UPDATED

    def test_no_updates_is_success(self, cfn):
        client, stubber = cfn
        stubber.add_response("describe_stacks", describe_ok(), {"StackName": "app-test"})
        stubber.add_client_error("update_stack", service_error_code="ValidationError",
                                 service_message="No updates are to be performed.")

        result = StackDeployer(client=client).deploy(StackConfig("app-test", TEMPLATE), wait=False)

        assert result == STACK_UNCHANGED

    def test_update_failure(self, cfn):
        client, stubber = cfn
        stubber.add_response("describe_stacks", describe_ok(), {"StackName": "app-test"})
        stubber.add_client_error("update_stack", service_error_code="InsufficientCapabilitiesException",
                                 service_message="Requires capabilities")

        with pytest.raises(StackError, match="^update stack app-test: "):
            StackDeployer(client=client).deploy(StackConfig("app-test", TEMPLATE), wait=False)

    def test_only_declared_parameters_and_sorted_tags(self, cfn):
        client, stubber = cfn
        stubber.add_client_error("describe_stacks", service_error_code="ValidationError",
                                 service_message="Stack with id app-test does not exist")
        stubber.add_response("get_template_summary",
                             {"Parameters": [{"ParameterKey": "AppName"}]},
                             {"TemplateBody": TEMPLATE})
        stubber.add_response("create_stack", {"StackId": STACK_ID}, stack_call(
            Parameters=[{"ParameterKey": "AppName", "ParameterValue": "app"}],
            Tags=[{"Key": "a", "Value": "1"}, {"Key": "b", "Value": "2"}],
        ))

        StackDeployer(client=client).deploy(
            StackConfig("app-test", TEMPLATE,
                        parameters={"AppName": "app", "ImageTag": "v1"},
                        tags={"b": "2", "a": "1"}),
            wait=False,
        )

    def test_outputs(self, cfn):
        client, stubber = cfn
        stubber.add_response(
            "describe_stacks",
            describe_ok("app-test-fe", outputs=[{"OutputKey": "URL", "OutputValue": "https://fe.example.com"}]),
            {"StackName": "app-test-fe"},
        )

        assert StackDeployer(client=client).outputs("app-test-fe") == {"URL": "https://fe.example.com"}


class TestStackNames:
    def test_names(self):
        assert env_stack_name("app", "test") == "app-test"
        assert workload_stack_name("app", "test", "fe") == "app-test-fe"
