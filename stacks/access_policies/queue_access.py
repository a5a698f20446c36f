"""
Queue access policy binding.

Each queue gets one resource policy with two statements: the deploying
account keeps full control, and the messaging service may send messages only
when the request originates from one exact topic ARN.
"""

import logging
from typing import Dict, Optional

from aws_cdk import aws_iam as iam, aws_sqs as sqs

from stacks.common import arns
from stacks.common.constants import (
    OWNER_STATEMENT_SID,
    PUBLISHER_STATEMENT_SID,
    SNS_SERVICE_PRINCIPAL,
    SOURCE_ARN_CONDITION_KEY
)
from stacks.common.exceptions import DuplicateResourceError, ValidationError
from stacks.common.validators import AWSResourceValidator
from .documents import PolicyDocumentBuilder

logger = logging.getLogger(__name__)

QUEUE_FULL_ACCESS_ACTION = "SQS:*"
QUEUE_SEND_MESSAGE_ACTION = "SQS:SendMessage"

# Child ids under a queue that hold its resource policy; "Policy" is the one
# CDK creates for Queue.add_to_resource_policy
QUEUE_POLICY_CONSTRUCT_ID = "AccessPolicy"
CDK_QUEUE_POLICY_CONSTRUCT_ID = "Policy"


def owner_statement(account_id: str, queue_arn: str) -> iam.PolicyStatement:
    """Full access for the account root on one queue."""
    return iam.PolicyStatement(
        sid=OWNER_STATEMENT_SID,
        effect=iam.Effect.ALLOW,
        principals=[iam.ArnPrincipal(arns.account_root_arn(account_id))],
        actions=[QUEUE_FULL_ACCESS_ACTION],
        resources=[queue_arn]
    )


def publisher_statement(queue_arn: str,
                        source_arn: str,
                        publisher_service: str = SNS_SERVICE_PRINCIPAL) -> iam.PolicyStatement:
    """SendMessage for a service principal, scoped to one source ARN."""
    return iam.PolicyStatement(
        sid=PUBLISHER_STATEMENT_SID,
        effect=iam.Effect.ALLOW,
        principals=[iam.ServicePrincipal(publisher_service)],
        actions=[QUEUE_SEND_MESSAGE_ACTION],
        resources=[queue_arn],
        conditions={"ArnEquals": {SOURCE_ARN_CONDITION_KEY: source_arn}}
    )


class QueueAccessBinder:
    """
    Declares the access policy of queues.

    The policy is declared as a child of the queue it protects, so a queue
    that already carries a policy is detected no matter which binder (or CDK
    itself) declared it. Binding a queue twice is a graph construction error
    because a queue must have exactly one active policy scoped to exactly one
    source.

    Note:
        If the source topic is recreated its ARN changes and the binding must
        be declared again with the new ARN. Stale bindings are not detected.
    """

    def __init__(self,
                 publisher_service: str = SNS_SERVICE_PRINCIPAL,
                 builder: Optional[PolicyDocumentBuilder] = None):
        self.publisher_service = publisher_service
        self.builder = builder or PolicyDocumentBuilder()
        self.documents: Dict[str, iam.PolicyDocument] = {}

    def bind(self,
             queue: sqs.IQueue,
             account_id: str,
             source_arn: str) -> sqs.CfnQueuePolicy:
        """
        Attach an owner + publisher policy to a queue.

        Args:
            queue: Declared queue; its ARN goes into the statements and its URL
                into the attachment
            account_id: Account whose root keeps full access
            source_arn: Exact ARN of the only resource allowed to publish

        Returns:
            The declared queue policy

        Raises:
            ValidationError: If account id or source ARN is empty
            DuplicateResourceError: If the queue already has a policy
        """
        if not account_id:
            raise ValidationError("Account id is required to bind a queue policy", parameter_name="account_id")
        if not source_arn:
            raise ValidationError("Source ARN is required to bind a queue policy", parameter_name="source_arn")
        AWSResourceValidator.validate_arn(source_arn)

        queue_path = queue.node.path
        for child_id in (QUEUE_POLICY_CONSTRUCT_ID, CDK_QUEUE_POLICY_CONSTRUCT_ID):
            if queue.node.try_find_child(child_id) is not None:
                raise DuplicateResourceError(
                    f"Queue '{queue_path}' already has an access policy binding",
                    resource_type="AWS::SQS::QueuePolicy",
                    identifier=queue_path
                )

        document = self.builder.build([
            owner_statement(account_id, queue.queue_arn),
            publisher_statement(queue.queue_arn, source_arn, self.publisher_service)
        ])

        policy = sqs.CfnQueuePolicy(
            queue,
            QUEUE_POLICY_CONSTRUCT_ID,
            policy_document=document,
            queues=[queue.queue_url]
        )
        policy.add_property_override("PolicyDocument.Id", self.builder.policy_id)
        self.documents[queue_path] = document

        logger.info(f"Bound access policy to queue {queue_path}")
        return policy

    def document_for(self, queue: sqs.IQueue) -> iam.PolicyDocument:
        """Return the policy document bound to a queue by this binder."""
        return self.documents[queue.node.path]
