"""
Deployment package.

The stack assembling the messaging topology and the request validator into
one provisioning graph.
"""

from .stack import DeploymentGraphStack

__all__ = [
    "DeploymentGraphStack"
]
