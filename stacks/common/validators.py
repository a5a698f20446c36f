"""Validation utilities for CDK stacks."""

import re
from typing import Any, Dict, Optional

from .exceptions import ValidationError


ACCOUNT_ID_PATTERN = re.compile(r'^[0-9]{12}$')
REGION_PATTERN = re.compile(r'^[a-z]{2}(-gov|-iso[a-z]?)?-[a-z]+-[0-9]+$')
MODEL_ID_PATTERN = re.compile(r'^[a-z0-9]([a-z0-9-]*[a-z0-9])?$')


def _is_token(value: Any) -> bool:
    # CDK tokens are resolved by CloudFormation and cannot be checked at synth time
    return isinstance(value, str) and '${Token[' in value


class ConfigValidator:
    """Utility class for validating configuration parameters."""

    @staticmethod
    def validate_account_id(account_id: Any) -> None:
        """
        Validate an AWS account identifier (twelve digits).

        Raises:
            ValidationError: If the account id is missing or malformed
        """
        if not isinstance(account_id, str) or not ACCOUNT_ID_PATTERN.match(account_id):
            raise ValidationError(
                f"Account id must be a 12 digit string, got {account_id!r}",
                parameter_name="account_id",
                provided_value=str(account_id)
            )

    @staticmethod
    def validate_region(region: Any) -> None:
        """
        Validate an AWS region code such as ``us-east-1``.

        Raises:
            ValidationError: If the region is missing or malformed
        """
        if not isinstance(region, str) or not REGION_PATTERN.match(region):
            raise ValidationError(
                f"Invalid region code: {region!r}",
                parameter_name="region",
                provided_value=str(region)
            )

    @staticmethod
    def validate_model_id(model_id: Any) -> None:
        """
        Validate a model identifier used to derive queue names.

        Raises:
            ValidationError: If the model id is not lowercase alphanumeric/hyphen
        """
        if not isinstance(model_id, str) or not MODEL_ID_PATTERN.match(model_id):
            raise ValidationError(
                f"Invalid model id: {model_id!r}. "
                f"Only lowercase letters, numbers and inner hyphens allowed",
                parameter_name="model_id",
                provided_value=str(model_id)
            )

    @staticmethod
    def validate_resource_name(name: str, max_length: int = 80) -> None:
        """
        Validate AWS resource name format.

        Topic and queue names may carry the ``.fifo`` suffix, so a single
        trailing ``.fifo`` is accepted on top of the usual character set.

        Args:
            name: Resource name to validate
            max_length: Maximum allowed length

        Raises:
            ValidationError: If name format is invalid
        """
        if _is_token(name):
            return

        if not name:
            raise ValidationError(
                "Resource name cannot be empty",
                parameter_name="name",
                provided_value=name
            )

        if len(name) > max_length:
            raise ValidationError(
                f"Resource name too long (max {max_length}): {name}",
                parameter_name="name",
                provided_value=name
            )

        base_name = name[:-len('.fifo')] if name.endswith('.fifo') else name
        if not re.match(r'^[a-zA-Z0-9-_]+$', base_name):
            raise ValidationError(
                f"Invalid resource name format: {name}. "
                f"Only alphanumeric characters, hyphens, and underscores allowed",
                parameter_name="name",
                provided_value=name
            )

    @staticmethod
    def validate_environment_vars(env_vars: Optional[Dict[str, str]]) -> None:
        """
        Validate environment variables dictionary.

        Args:
            env_vars: Environment variables to validate

        Raises:
            ValidationError: If environment variables are invalid
        """
        if env_vars is None:
            return

        if not isinstance(env_vars, dict):
            raise ValidationError(
                "Environment variables must be a dictionary",
                parameter_name="environment_vars",
                provided_value=str(type(env_vars))
            )

        for key, value in env_vars.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValidationError(
                    f"Environment variable key and value must be strings: {key}={value}",
                    parameter_name="environment_vars",
                    provided_value=f"{key}={value}"
                )


class AWSResourceValidator:
    """Utility class for validating AWS resource parameters."""

    @staticmethod
    def validate_arn(arn: str, service: Optional[str] = None) -> None:
        """
        Validate AWS ARN format.

        Args:
            arn: ARN to validate
            service: Expected AWS service (optional)

        Raises:
            ValidationError: If ARN format is invalid
        """
        if not arn:
            raise ValidationError(
                "ARN cannot be empty",
                parameter_name="arn",
                provided_value=arn
            )

        # Skip validation for CDK tokens (CloudFormation references)
        if _is_token(arn) or '${' in arn:
            return

        arn_pattern = re.compile(
            r'^arn:aws[a-zA-Z0-9-]*:[a-zA-Z0-9-]+:'
            r'[a-zA-Z0-9-]*:[0-9]*:[a-zA-Z0-9-/._*:]+$'
        )

        if not arn_pattern.match(arn):
            raise ValidationError(
                f"Invalid ARN format: {arn}",
                parameter_name="arn",
                provided_value=arn
            )

        if service and arn.split(':')[2] != service:
            raise ValidationError(
                f"Expected {service} service ARN, got {arn.split(':')[2]}",
                parameter_name="arn",
                provided_value=arn
            )
