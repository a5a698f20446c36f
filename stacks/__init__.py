"""
CDK Stack modules for the message-routing topology.

This package provides:
- The deployment graph stack
- The messaging topology and access policy binders
- Base classes, exceptions and validators shared by the stacks
"""

from .deployment.stack import DeploymentGraphStack
from .messaging import MessagingTopology, QueueSpec
from .request_validator import RequestValidatorFunction, ValidationApi

# Import common components
from .common import (
    BaseStack,
    AccountContext,
    StackConfigurationError,
    ResourceCreationError,
    DuplicateResourceError,
    ValidationError,
    ConfigValidator,
    AWSResourceValidator
)

__all__ = [
    # Stack classes
    "DeploymentGraphStack",

    # Constructs
    "MessagingTopology",
    "QueueSpec",
    "RequestValidatorFunction",
    "ValidationApi",

    # Base classes
    "BaseStack",
    "AccountContext",

    # Exceptions
    "StackConfigurationError",
    "ResourceCreationError",
    "DuplicateResourceError",
    "ValidationError",

    # Validators
    "ConfigValidator",
    "AWSResourceValidator"
]
