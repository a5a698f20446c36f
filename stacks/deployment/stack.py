"""
Deployment graph stack.

Declares, in order: the messaging topology, the validation function with its
artifact storage and log group, the REST API in front of it and finally the
invocation permission that closes the request chain. Nothing is materialized
here; CloudFormation orders creation from the references between constructs.
"""

import logging
from typing import Dict

from aws_cdk import CfnOutput
from constructs import Construct

from helper.artifact import FunctionArtifact
from helper.config import Config
from stacks.access_policies import InvocationPermissionBinder
from stacks.common.base import BaseStack
from stacks.common.constants import (
    ANY_STAGE,
    API_GATEWAY_SERVICE_PRINCIPAL,
    API_INVOKE_STATEMENT_ID,
    DEFAULT_API_HTTP_METHOD,
    DEFAULT_API_RESOURCE_PATH_PART,
    LAMBDA_INVOKE_ACTION,
    SNS_SERVICE_PRINCIPAL
)
from stacks.common.context import AccountContext
from stacks.common.exceptions import StackConfigurationError, ValidationError
from stacks.common.validators import ConfigValidator
from stacks.messaging import MessagingTopology
from stacks.request_validator import RequestValidatorFunction, ValidationApi

logger = logging.getLogger(__name__)


class DeploymentGraphStack(BaseStack):
    """
    Message-routing topology plus the HTTP-triggered validation function.

    Attributes:
        topology: Topics, queues, subscriptions and queue policies
        validator: Validation function and its artifact storage
        api: REST API, deployment and stage
        invoke_permission: Permission letting the API invoke the function
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 context: AccountContext,
                 artifact: FunctionArtifact,
                 publisher_service: str = SNS_SERVICE_PRINCIPAL,
                 **kwargs) -> None:
        """
        Initialize the deployment graph.

        Args:
            scope: CDK scope
            construct_id: Construct ID
            config: Configuration object
            context: Resolved account and region
            artifact: Packaged validation function
            publisher_service: Service principal allowed to publish into the queues
            **kwargs: Additional keyword arguments for Stack

        Raises:
            StackConfigurationError: If configuration values are invalid
        """
        kwargs.setdefault("env", context.to_environment())
        kwargs.setdefault("description", "Fan-out message routing topology with an HTTP validation function")
        super().__init__(scope, construct_id, config, **kwargs)

        self.context = context
        self.project_name = str(self.get_required_config("ProjectName")).strip()

        self.topology = MessagingTopology(
            self,
            "messaging",
            context=context,
            name_prefix=self.project_name,
            model_ids=config.get_model_ids(),
            queue_defaults=config.get_queue_defaults(),
            queue_overrides=config.get_queue_overrides(),
            output_queue_overrides=config.get_output_queue_overrides(),
            publisher_service=publisher_service
        )

        function_environment = self._function_environment()
        function_log_group = self.create_log_group(
            f"{self.project_name}-request-validator",
            retention_days=config.get_log_retention_days()
        )
        self.validator = RequestValidatorFunction(
            self,
            "request-validator",
            artifact=artifact,
            function_name=f"{self.project_name}-request-validator",
            environment=function_environment,
            log_group=function_log_group
        )

        self.api = ValidationApi(
            self,
            "validation-api",
            context=context,
            api_name=f"{self.project_name}-validation-api",
            target=self.validator.function,
            resource_path_part=config.get_optional("ApiResourcePath", DEFAULT_API_RESOURCE_PATH_PART),
            http_method=config.get_optional("ApiHttpMethod", DEFAULT_API_HTTP_METHOD),
            stage_name=config.get_api_stage_name()
        )

        self.invocation_binder = InvocationPermissionBinder()
        self.invoke_permission = self.invocation_binder.grant(
            action=LAMBDA_INVOKE_ACTION,
            target=self.validator.function,
            principal=API_GATEWAY_SERVICE_PRINCIPAL,
            source_arn=self.api.invoke_source_arn(ANY_STAGE),
            statement_id=API_INVOKE_STATEMENT_ID
        )

        self.add_common_tags(self)

        CfnOutput(
            self,
            "url",
            value=self.api.url,
            description="Invocation URL of the validation API"
        )

        logger.info(f"Declared deployment graph {construct_id} in {context.account_id}/{context.region}")

    def _function_environment(self) -> Dict[str, str]:
        environment = self.config.get_function_environment()
        try:
            ConfigValidator.validate_environment_vars(environment)
        except ValidationError as e:
            logger.error(f"Invalid function environment: {e}")
            raise StackConfigurationError(str(e), config_key="FunctionEnvironment") from e
        return {key: str(value) for key, value in environment.items()}

    @property
    def redeployment_trigger(self) -> str:
        return self.api.redeployment_trigger
