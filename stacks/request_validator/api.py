"""
REST API front end of the validation function.

The deployment is declared explicitly instead of letting the API manage it.
Its logical id carries a hash over the resource, method and integration
identities, so CloudFormation creates a new deployment if and only if the
request-handling chain changed.
"""

import hashlib
import json
import logging

from aws_cdk import aws_apigateway as apigateway, aws_lambda as lambda_
from constructs import Construct

from stacks.common import arns
from stacks.common.constants import (
    ANY_STAGE,
    API_INTEGRATION_HTTP_METHOD,
    DEFAULT_API_HTTP_METHOD,
    DEFAULT_API_RESOURCE_PATH_PART,
    DEFAULT_API_STAGE_NAME
)
from stacks.common.context import AccountContext

logger = logging.getLogger(__name__)


def redeployment_trigger(resource_id: str, method_id: str, integration_id: str) -> str:
    """Return a stable hash over the three identities of a request-handling chain."""
    encoded = json.dumps([resource_id, method_id, integration_id], separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class ValidationApi(Construct):
    """REST API with one resource, one proxy method, a deployment and a stage."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 context: AccountContext,
                 api_name: str,
                 target: lambda_.IFunction,
                 resource_path_part: str = DEFAULT_API_RESOURCE_PATH_PART,
                 http_method: str = DEFAULT_API_HTTP_METHOD,
                 stage_name: str = DEFAULT_API_STAGE_NAME,
                 authorization_type: apigateway.AuthorizationType = apigateway.AuthorizationType.NONE) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        self.http_method = http_method.upper()
        self.authorization_type = authorization_type

        self.rest_api = apigateway.RestApi(
            self,
            "rest-api",
            rest_api_name=api_name,
            deploy=False,
            cloud_watch_role=False
        )

        self.resource = self.rest_api.root.add_resource(resource_path_part)

        self.integration = apigateway.Integration(
            type=apigateway.IntegrationType.AWS_PROXY,
            integration_http_method=API_INTEGRATION_HTTP_METHOD,
            uri=arns.lambda_invoke_arn(context, target.function_arn)
        )

        self.method = self.resource.add_method(
            self.http_method,
            self.integration,
            authorization_type=self.authorization_type
        )

        self.resource_identity = f"{self.resource.node.path}:{self.resource.path}"
        self.method_identity = f"{self.method.node.path}:{self.method.http_method}:{self.authorization_type.value}"
        self.integration_identity = (
            f"{apigateway.IntegrationType.AWS_PROXY.value}:{API_INTEGRATION_HTTP_METHOD}:{target.node.path}"
        )
        self.redeployment_trigger = redeployment_trigger(
            self.resource_identity,
            self.method_identity,
            self.integration_identity
        )

        self.deployment = apigateway.Deployment(
            self,
            "deployment",
            api=self.rest_api,
            description=f"{api_name} deployment"
        )
        self.deployment.add_to_logical_id({"redeployment": self.redeployment_trigger})
        self.deployment.node.add_dependency(self.method)

        self.stage = apigateway.Stage(
            self,
            "stage",
            deployment=self.deployment,
            stage_name=stage_name
        )

        logger.info(f"Declared API {api_name}: {self.http_method} {self.resource.path} -> {target.node.path}")

    def invoke_source_arn(self, stage: str = ANY_STAGE) -> str:
        """Return the execute-api ARN matching calls to this method on ``stage``."""
        return arns.execute_api_arn(
            self.context,
            self.rest_api.rest_api_id,
            stage,
            self.http_method,
            self.resource.path
        )

    @property
    def url(self) -> str:
        return arns.execute_api_url(self.context, self.rest_api.rest_api_id)
