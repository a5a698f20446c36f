"""
Unit tests for policy document assembly.

Covers structural validation of statements and the rendered IAM JSON.
"""

import pytest
import aws_cdk as cdk
from aws_cdk import aws_iam as iam

from stacks.access_policies import PolicyDocumentBuilder
from stacks.common.exceptions import ValidationError

QUEUE_ARN = "arn:aws:sqs:us-east-1:123456789012:queue.fifo"
TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:t.fifo"


def _statement(**overrides):
    values = dict(
        effect=iam.Effect.ALLOW,
        principals=[iam.ServicePrincipal("sns.amazonaws.com")],
        actions=["SQS:SendMessage"],
        resources=[QUEUE_ARN],
    )
    values.update(overrides)
    return iam.PolicyStatement(**values)


def _render(document):
    return cdk.Stack().resolve(document)


class TestPolicyDocumentBuilder:
    """Test structural validation of statements."""

    def test_document_has_fixed_version(self):
        document = PolicyDocumentBuilder().build([_statement()])

        rendered = _render(document)
        assert rendered["Version"] == "2012-10-17"
        assert len(rendered["Statement"]) == 1

    def test_default_and_custom_policy_id(self):
        assert PolicyDocumentBuilder().policy_id == "__default_policy_ID"
        assert PolicyDocumentBuilder(policy_id="custom").policy_id == "custom"

    def test_statement_order_is_preserved(self):
        statements = [_statement(sid="first"), _statement(sid="second"), _statement(sid="third")]

        rendered = _render(PolicyDocumentBuilder().build(statements))

        assert [s["Sid"] for s in rendered["Statement"]] == ["first", "second", "third"]

    def test_empty_statement_list_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PolicyDocumentBuilder().build([])
        assert exc_info.value.parameter_name == "statements"

    @pytest.mark.parametrize("overrides, parameter", [
        ({"principals": []}, "principals"),
        ({"actions": []}, "actions"),
        ({"resources": []}, "resources"),
        ({"conditions": {"ArnEquals": {}}}, "conditions"),
        ({"conditions": {"ArnEquals": {"aws:SourceArn": []}}}, "conditions"),
    ])
    def test_missing_parts_are_rejected(self, overrides, parameter):
        with pytest.raises(ValidationError) as exc_info:
            PolicyDocumentBuilder().build([_statement(**overrides)])
        assert exc_info.value.parameter_name == parameter

    def test_action_strings_are_not_interpreted(self):
        document = PolicyDocumentBuilder().build([_statement(actions=["SQS:NoSuchAction"])])
        assert _render(document)["Statement"][0]["Action"] == "SQS:NoSuchAction"


class TestStatementRendering:
    """Test the IAM JSON shape of built documents."""

    def test_single_values_render_as_scalars(self):
        statement = _statement(conditions={"ArnEquals": {"aws:SourceArn": TOPIC_ARN}})

        rendered = _render(PolicyDocumentBuilder().build([statement]))["Statement"][0]

        assert rendered["Principal"] == {"Service": "sns.amazonaws.com"}
        assert rendered["Action"] == "SQS:SendMessage"
        assert rendered["Resource"] == QUEUE_ARN
        assert rendered["Condition"] == {"ArnEquals": {"aws:SourceArn": TOPIC_ARN}}

    def test_multiple_values_render_as_lists(self):
        statement = _statement(
            principals=[
                iam.ArnPrincipal("arn:aws:iam::111111111111:root"),
                iam.ArnPrincipal("arn:aws:iam::222222222222:root"),
            ],
            actions=["SQS:SendMessage", "SQS:GetQueueUrl"],
        )

        rendered = _render(PolicyDocumentBuilder().build([statement]))["Statement"][0]

        assert sorted(rendered["Principal"]["AWS"]) == [
            "arn:aws:iam::111111111111:root",
            "arn:aws:iam::222222222222:root",
        ]
        assert sorted(rendered["Action"]) == ["SQS:GetQueueUrl", "SQS:SendMessage"]

    def test_sid_and_conditions_are_omitted_when_not_set(self):
        rendered = _render(PolicyDocumentBuilder().build([_statement()]))["Statement"][0]

        assert "Sid" not in rendered
        assert "Condition" not in rendered
