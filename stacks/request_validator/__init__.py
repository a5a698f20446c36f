"""
Request validator package.

The validation Lambda function, its artifact storage and the REST API in
front of it.
"""

from .api import ValidationApi, redeployment_trigger
from .function import RequestValidatorFunction

__all__ = [
    "RequestValidatorFunction",
    "ValidationApi",
    "redeployment_trigger"
]
