"""
Unit tests for the messaging topology.

Each queue must be subscribed to exactly one topic and its policy must be
bound to that topic's ARN and no other.
"""

import pytest
import aws_cdk as cdk
from aws_cdk.assertions import Template

from stacks.common.exceptions import DuplicateResourceError, ValidationError
from stacks.messaging import MessagingTopology, QueueSpec


def _synth(account_context, model_ids, **kwargs):
    stack = cdk.Stack(cdk.App(), "TestStack", env=account_context.to_environment())
    topology = MessagingTopology(
        stack,
        "messaging",
        context=account_context,
        name_prefix="sd-on-eks",
        model_ids=model_ids,
        **kwargs
    )
    return topology, Template.from_stack(stack)


def _topic_ids(template):
    topics = template.find_resources("AWS::SNS::Topic")
    return {props["Properties"]["TopicName"]: logical_id for logical_id, props in topics.items()}


def _queue_ids(template):
    queues = template.find_resources("AWS::SQS::Queue")
    return {props["Properties"]["QueueName"]: logical_id for logical_id, props in queues.items()}


class TestMessagingTopology:
    """Test topics, queues, subscriptions and bindings."""

    def test_reference_topology_resource_counts(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c"])

        template.resource_count_is("AWS::SNS::Topic", 2)
        template.resource_count_is("AWS::SQS::Queue", 4)
        template.resource_count_is("AWS::SNS::Subscription", 4)
        template.resource_count_is("AWS::SQS::QueuePolicy", 4)

    def test_adding_a_model_adds_one_of_each(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c", "d"])

        template.resource_count_is("AWS::SNS::Topic", 2)
        template.resource_count_is("AWS::SQS::Queue", 5)
        template.resource_count_is("AWS::SNS::Subscription", 5)
        template.resource_count_is("AWS::SQS::QueuePolicy", 5)

    def test_resource_names(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c"])

        assert set(_topic_ids(template)) == {"sd-on-eks-topic.fifo", "sd-on-eks-output-topic.fifo"}
        assert set(_queue_ids(template)) == {
            "sd-on-eks-input-sqs-model-a.fifo",
            "sd-on-eks-input-sqs-model-b.fifo",
            "sd-on-eks-input-sqs-model-c.fifo",
            "sd-on-eks-output-sqs.fifo",
        }

    def test_each_policy_is_bound_to_its_own_topic(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c"])
        topics = _topic_ids(template)
        queues = _queue_ids(template)

        expected_topic = {
            queues["sd-on-eks-input-sqs-model-a.fifo"]: topics["sd-on-eks-topic.fifo"],
            queues["sd-on-eks-input-sqs-model-b.fifo"]: topics["sd-on-eks-topic.fifo"],
            queues["sd-on-eks-input-sqs-model-c.fifo"]: topics["sd-on-eks-topic.fifo"],
            queues["sd-on-eks-output-sqs.fifo"]: topics["sd-on-eks-output-topic.fifo"],
        }

        policies = template.find_resources("AWS::SQS::QueuePolicy")
        bound = {}
        for policy in policies.values():
            properties = policy["Properties"]
            queue_id = properties["Queues"][0]["Ref"]
            statements = properties["PolicyDocument"]["Statement"]

            owners = [s for s in statements if s["Sid"] == "__owner_statement"]
            publishers = [s for s in statements if s["Sid"] == "__publisher_statement"]
            assert len(owners) == 1
            assert len(publishers) == 1
            assert owners[0]["Resource"] == {"Fn::GetAtt": [queue_id, "Arn"]}
            assert publishers[0]["Resource"] == {"Fn::GetAtt": [queue_id, "Arn"]}

            bound[queue_id] = publishers[0]["Condition"]["ArnEquals"]["aws:SourceArn"]

        assert bound == {queue_id: {"Ref": topic_id} for queue_id, topic_id in expected_topic.items()}

    def test_subscriptions_match_bindings_and_wait_for_policies(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c"])
        resources = template.to_json()["Resources"]

        policy_by_queue = {
            props["Properties"]["Queues"][0]["Ref"]: (logical_id, props)
            for logical_id, props in template.find_resources("AWS::SQS::QueuePolicy").items()
        }

        subscriptions = template.find_resources("AWS::SNS::Subscription")
        for logical_id, subscription in subscriptions.items():
            properties = subscription["Properties"]
            assert properties["Protocol"] == "sqs"
            queue_id = properties["Endpoint"]["Fn::GetAtt"][0]
            policy_id, policy = policy_by_queue[queue_id]

            publisher = policy["Properties"]["PolicyDocument"]["Statement"][1]
            assert publisher["Condition"]["ArnEquals"]["aws:SourceArn"] == properties["TopicArn"]
            assert policy_id in resources[logical_id].get("DependsOn", [])

    def test_queue_attributes_and_overrides(self, account_context):
        _, template = _synth(account_context, ["a", "b", "c"],
                             queue_overrides={"c": {"VisibilityTimeoutSeconds": 30}})

        template.has_resource_properties("AWS::SQS::Queue", {
            "QueueName": "sd-on-eks-input-sqs-model-c.fifo",
            "FifoQueue": True,
            "MaximumMessageSize": 2048,
            "MessageRetentionPeriod": 86400,
            "ReceiveMessageWaitTimeSeconds": 10,
            "VisibilityTimeout": 30,
        })
        queue_a = template.find_resources("AWS::SQS::Queue", {
            "Properties": {"QueueName": "sd-on-eks-input-sqs-model-a.fifo"}
        })
        assert "VisibilityTimeout" not in list(queue_a.values())[0]["Properties"]

    def test_output_queue_overrides_are_separate_from_models(self, account_context):
        _, template = _synth(account_context, ["a", "output"],
                             queue_overrides={"output": {"VisibilityTimeoutSeconds": 99}},
                             output_queue_overrides={"VisibilityTimeoutSeconds": 45})

        timeouts = {
            props["Properties"]["QueueName"]: props["Properties"].get("VisibilityTimeout")
            for props in template.find_resources("AWS::SQS::Queue").values()
        }
        assert timeouts == {
            "sd-on-eks-input-sqs-model-a.fifo": None,
            "sd-on-eks-input-sqs-model-output.fifo": 99,
            "sd-on-eks-output-sqs.fifo": 45,
        }

    @pytest.mark.parametrize("overrides", [
        {"C": {"VisibilityTimeoutSeconds": 30}},
        {"zz": {"MaxMessageSize": 1024}},
    ])
    def test_overrides_for_undeclared_models_are_rejected(self, account_context, overrides):
        with pytest.raises(ValidationError) as exc_info:
            _synth(account_context, ["a", "b", "c"], queue_overrides=overrides)
        assert exc_info.value.parameter_name == "queue_overrides"

    def test_unknown_output_queue_attribute_is_rejected(self, account_context):
        with pytest.raises(ValidationError):
            _synth(account_context, ["a"], output_queue_overrides={"Bogus": 1})

    def test_owner_principal_is_deploying_account(self, account_context):
        _, template = _synth(account_context, ["a"])

        for policy in template.find_resources("AWS::SQS::QueuePolicy").values():
            owner = policy["Properties"]["PolicyDocument"]["Statement"][0]
            assert owner["Principal"] == {"AWS": "arn:aws:iam::123456789012:root"}

    def test_source_lookup(self, account_context):
        topology, _ = _synth(account_context, ["a", "b"])

        assert topology.source_topic_for(topology.input_queues["b"]) is topology.input_topic
        assert topology.source_topic_for(topology.output_queue) is topology.output_topic
        assert topology.source_arn_for(topology.output_queue) == topology.output_topic.topic_arn
        assert len(topology.all_queues) == 3

    def test_duplicate_model_id_is_rejected(self, account_context):
        with pytest.raises(DuplicateResourceError):
            _synth(account_context, ["a", "b", "a"])

    @pytest.mark.parametrize("model_ids", [[], ["A"], ["a_b"], ["-a"]])
    def test_invalid_model_ids_are_rejected(self, account_context, model_ids):
        with pytest.raises(ValidationError):
            _synth(account_context, model_ids)


class TestQueueSpec:
    """Test queue attribute overrides."""

    def test_defaults(self):
        spec = QueueSpec(name="q.fifo")
        assert spec.max_message_size_bytes == 2048
        assert spec.retention_seconds == 86400
        assert spec.receive_wait_seconds == 10
        assert spec.visibility_timeout_seconds is None
        assert spec.fifo

    def test_overrides_are_applied(self):
        spec = QueueSpec(name="q.fifo").with_overrides({"MaxMessageSize": 4096, "VisibilityTimeoutSeconds": 30})
        assert spec.max_message_size_bytes == 4096
        assert spec.visibility_timeout_seconds == 30

    def test_unknown_override_is_rejected(self):
        with pytest.raises(ValidationError):
            QueueSpec(name="q.fifo").with_overrides({"DelaySeconds": 5})
