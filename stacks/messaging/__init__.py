"""
Messaging package.

Fan-out pub/sub backbone: topics, ordered queues, subscriptions and the
access policy bound to each queue.
"""

from .topology import MessagingTopology, QueueSpec

__all__ = [
    "MessagingTopology",
    "QueueSpec"
]
