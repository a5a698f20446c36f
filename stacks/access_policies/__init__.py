"""
Access policy package.

This package builds resource policy documents and binds them to queues, and
grants invocation permissions on functions.
"""

from .documents import PolicyDocumentBuilder
from .queue_access import QueueAccessBinder, owner_statement, publisher_statement
from .invocation import InvocationPermissionBinder

__all__ = [
    "PolicyDocumentBuilder",
    "QueueAccessBinder",
    "owner_statement",
    "publisher_statement",
    "InvocationPermissionBinder"
]
