"""
ARN and endpoint formatting.

Every hand-built ARN in the project comes from one function in this module so
the format for each resource type lives in exactly one place. Identifiers
passed in (API ids, function ARNs) are expected to be construct attributes,
never invented names.
"""

from dataclasses import dataclass

from .context import AccountContext
from .exceptions import ValidationError

AWS_PARTITION = "aws"
LAMBDA_INVOKE_API_VERSION = "2015-03-31"


@dataclass(frozen=True)
class ExecuteApiArnParts:
    """Components of an ``execute-api`` ARN."""

    region: str
    account_id: str
    api_id: str
    stage: str
    http_method: str
    resource_path: str


def account_root_arn(account_id: str) -> str:
    """Return the root principal ARN of an account."""
    return f"arn:{AWS_PARTITION}:iam::{account_id}:root"


def lambda_invoke_arn(context: AccountContext, function_arn: str) -> str:
    """Return the API Gateway integration URI that invokes a Lambda function."""
    return (
        f"arn:{AWS_PARTITION}:apigateway:{context.region}:lambda:path/"
        f"{LAMBDA_INVOKE_API_VERSION}/functions/{function_arn}/invocations"
    )


def execute_api_arn(context: AccountContext,
                    api_id: str,
                    stage: str,
                    http_method: str,
                    resource_path: str) -> str:
    """
    Return the ``execute-api`` ARN matching requests to one method of a REST API.

    Args:
        context: Account and region of the API
        api_id: REST API identifier
        stage: Stage name, or ``*`` to match any stage
        http_method: HTTP verb, or ``*``
        resource_path: Resource path starting with ``/``

    Raises:
        ValidationError: If the resource path is not absolute
    """
    if not resource_path.startswith("/"):
        raise ValidationError(
            f"Resource path must start with '/': {resource_path}",
            parameter_name="resource_path",
            provided_value=resource_path
        )
    return (
        f"arn:{AWS_PARTITION}:execute-api:{context.region}:{context.account_id}:"
        f"{api_id}/{stage}/{http_method}{resource_path}"
    )


def parse_execute_api_arn(arn: str) -> ExecuteApiArnParts:
    """
    Split an ``execute-api`` ARN back into its components.

    Raises:
        ValidationError: If the string is not an execute-api ARN
    """
    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn" or parts[2] != "execute-api":
        raise ValidationError(
            f"Not an execute-api ARN: {arn}",
            parameter_name="arn",
            provided_value=arn
        )

    segments = parts[5].split("/", 3)
    if len(segments) < 3:
        raise ValidationError(
            f"execute-api ARN is missing api id, stage or method: {arn}",
            parameter_name="arn",
            provided_value=arn
        )

    api_id, stage, http_method = segments[0], segments[1], segments[2]
    resource_path = "/" + segments[3] if len(segments) == 4 else "/"
    return ExecuteApiArnParts(
        region=parts[3],
        account_id=parts[4],
        api_id=api_id,
        stage=stage,
        http_method=http_method,
        resource_path=resource_path
    )


def execute_api_url(context: AccountContext, api_id: str) -> str:
    """Return the public invocation URL of a REST API."""
    return f"https://{api_id}.execute-api.{context.region}.amazonaws.com"
