"""
Fan-out messaging topology.

Declares one input topic fanning out to one ordered queue per model, and one
output topic feeding one output queue. Every queue is bound to the ARN of the
topic it subscribes to and to no other.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Set

from aws_cdk import Duration, aws_sns as sns, aws_sqs as sqs
from constructs import Construct

from stacks.access_policies import QueueAccessBinder
from stacks.common.constants import (
    DEFAULT_MAX_MESSAGE_SIZE_BYTES,
    DEFAULT_RECEIVE_WAIT_SECONDS,
    DEFAULT_RETENTION_SECONDS,
    INPUT_QUEUE_SUFFIX_TEMPLATE,
    INPUT_TOPIC_SUFFIX,
    OUTPUT_QUEUE_SUFFIX,
    OUTPUT_TOPIC_SUFFIX,
    SNS_SERVICE_PRINCIPAL
)
from stacks.common.context import AccountContext
from stacks.common.exceptions import DuplicateResourceError, ValidationError
from stacks.common.validators import ConfigValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueSpec:
    """Attributes of one ordered, durable queue."""
    name: str
    max_message_size_bytes: int = DEFAULT_MAX_MESSAGE_SIZE_BYTES
    retention_seconds: int = DEFAULT_RETENTION_SECONDS
    receive_wait_seconds: int = DEFAULT_RECEIVE_WAIT_SECONDS
    visibility_timeout_seconds: Optional[int] = None
    fifo: bool = True

    def with_overrides(self, values: Optional[Dict[str, Any]]) -> 'QueueSpec':
        """Apply configuration keys (``MaxMessageSize``, ``VisibilityTimeoutSeconds``, ...)."""
        if not values:
            return self
        mapping = {
            'MaxMessageSize': 'max_message_size_bytes',
            'MessageRetentionSeconds': 'retention_seconds',
            'ReceiveWaitTimeSeconds': 'receive_wait_seconds',
            'VisibilityTimeoutSeconds': 'visibility_timeout_seconds',
        }
        unknown = set(values) - set(mapping)
        if unknown:
            raise ValidationError(
                f"Unknown queue attributes for '{self.name}': {', '.join(sorted(unknown))}",
                parameter_name="queue_overrides",
                provided_value=str(sorted(unknown))
            )
        return replace(self, **{mapping[key]: value for key, value in values.items()})


class MessagingTopology(Construct):
    """
    Topics, queues, subscriptions and queue policies of the routing backbone.

    For each queue the declaration order is queue, policy bound to the owning
    topic's ARN, then the subscription referencing the queue ARN. The
    subscription depends on the policy so the topic can deliver as soon as it
    is subscribed.
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 context: AccountContext,
                 name_prefix: str,
                 model_ids: List[str],
                 queue_defaults: Optional[Dict[str, Any]] = None,
                 queue_overrides: Optional[Dict[str, Dict[str, Any]]] = None,
                 output_queue_overrides: Optional[Dict[str, Any]] = None,
                 publisher_service: str = SNS_SERVICE_PRINCIPAL) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        self.name_prefix = name_prefix
        self._queue_defaults = queue_defaults or {}
        self._queue_overrides = queue_overrides or {}
        self._output_queue_overrides = output_queue_overrides or {}
        self._names: Set[str] = set()
        self._source_topics: Dict[str, sns.ITopic] = {}

        self.model_ids = self._validate_model_ids(model_ids)
        self._validate_override_keys(self._queue_overrides, self.model_ids)
        self.binder = QueueAccessBinder(publisher_service=publisher_service)

        self.input_queues: Dict[str, sqs.Queue] = {}
        self.queue_policies: Dict[str, sqs.CfnQueuePolicy] = {}
        self.subscriptions: Dict[str, sns.Subscription] = {}

        self.input_topic = self._declare_topic("input-topic", f"{name_prefix}-{INPUT_TOPIC_SUFFIX}")
        for model_id in self.model_ids:
            key = f"input-queue-model-{model_id}"
            queue = self._declare_queue(
                key,
                self._queue_spec(
                    f"{name_prefix}-{INPUT_QUEUE_SUFFIX_TEMPLATE.format(model_id=model_id)}",
                    self._queue_overrides.get(model_id)
                )
            )
            self._connect(self.input_topic, queue, key)
            self.input_queues[model_id] = queue

        self.output_topic = self._declare_topic("output-topic", f"{name_prefix}-{OUTPUT_TOPIC_SUFFIX}")
        self.output_queue = self._declare_queue(
            "output-queue",
            self._queue_spec(f"{name_prefix}-{OUTPUT_QUEUE_SUFFIX}", self._output_queue_overrides)
        )
        self._connect(self.output_topic, self.output_queue, "output-queue")

        logger.info(
            f"Declared messaging topology '{name_prefix}': "
            f"{len(self.input_queues)} input queues, 1 output queue"
        )

    @staticmethod
    def _validate_model_ids(model_ids: List[str]) -> List[str]:
        if not model_ids:
            raise ValidationError(
                "At least one model id is required",
                parameter_name="model_ids",
                provided_value="[]"
            )
        seen: Set[str] = set()
        for model_id in model_ids:
            ConfigValidator.validate_model_id(model_id)
            if model_id in seen:
                raise DuplicateResourceError(
                    f"Model id '{model_id}' is listed more than once",
                    resource_type="AWS::SQS::Queue",
                    identifier=model_id
                )
            seen.add(model_id)
        return list(model_ids)

    @staticmethod
    def _validate_override_keys(overrides: Dict[str, Dict[str, Any]], model_ids: List[str]) -> None:
        unknown = set(overrides) - set(model_ids)
        if unknown:
            raise ValidationError(
                f"Queue overrides name undeclared model ids: {', '.join(sorted(unknown))}",
                parameter_name="queue_overrides",
                provided_value=str(sorted(unknown))
            )

    def _claim_name(self, name: str, resource_type: str) -> None:
        ConfigValidator.validate_resource_name(name)
        if name in self._names:
            raise DuplicateResourceError(
                f"Resource name '{name}' is declared more than once",
                resource_type=resource_type,
                identifier=name
            )
        self._names.add(name)

    def _queue_spec(self, name: str, overrides: Optional[Dict[str, Any]]) -> QueueSpec:
        return QueueSpec(name=name).with_overrides(self._queue_defaults).with_overrides(overrides)

    def _declare_topic(self, construct_id: str, topic_name: str) -> sns.Topic:
        self._claim_name(topic_name, "AWS::SNS::Topic")
        topic = sns.Topic(
            self,
            construct_id,
            topic_name=topic_name,
            fifo=True
        )
        logger.debug(f"Declared topic {topic_name}")
        return topic

    def _declare_queue(self, construct_id: str, spec: QueueSpec) -> sqs.Queue:
        self._claim_name(spec.name, "AWS::SQS::Queue")
        queue = sqs.Queue(
            self,
            construct_id,
            queue_name=spec.name,
            fifo=spec.fifo,
            max_message_size_bytes=spec.max_message_size_bytes,
            retention_period=Duration.seconds(spec.retention_seconds),
            receive_message_wait_time=Duration.seconds(spec.receive_wait_seconds),
            visibility_timeout=(
                Duration.seconds(spec.visibility_timeout_seconds)
                if spec.visibility_timeout_seconds is not None else None
            )
        )
        logger.debug(f"Declared queue {spec.name}")
        return queue

    def _connect(self, topic: sns.Topic, queue: sqs.Queue, key: str) -> None:
        policy = self.binder.bind(queue, self.context.account_id, topic.topic_arn)

        subscription = sns.Subscription(
            self,
            f"{key}-subscription",
            topic=topic,
            endpoint=queue.queue_arn,
            protocol=sns.SubscriptionProtocol.SQS
        )
        subscription.node.add_dependency(policy)

        self.queue_policies[key] = policy
        self.subscriptions[key] = subscription
        self._source_topics[queue.node.path] = topic

    def source_topic_for(self, queue: sqs.IQueue) -> sns.ITopic:
        """Return the topic a queue is subscribed to and bound to."""
        return self._source_topics[queue.node.path]

    def source_arn_for(self, queue: sqs.IQueue) -> str:
        """Return the publisher ARN a queue's policy is bound to."""
        return self.source_topic_for(queue).topic_arn

    @property
    def all_queues(self) -> List[sqs.Queue]:
        return list(self.input_queues.values()) + [self.output_queue]
