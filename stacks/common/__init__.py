"""
Common CDK stack components and utilities.

This module provides the pieces shared by every stack:
- Base stack with configuration access
- Account context and ARN formatting
- Exceptions and validators
"""

# Import base classes
from .base import BaseStack

# Import account context
from .context import AccountContext

# Import exceptions
from .exceptions import (
    StackConfigurationError,
    ResourceCreationError,
    DuplicateResourceError,
    ValidationError
)

# Import validators
from .validators import (
    ConfigValidator,
    AWSResourceValidator
)

# Import constants
from .constants import *

__all__ = [
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
    "AWSResourceValidator",

    # Constants (imported from constants module)
]
