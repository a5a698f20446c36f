"""
Access policy document assembly.

This module provides a purely structural builder for resource policy
documents. It checks that every statement has its required parts but does
not interpret action or resource strings; malformed values only surface when
CloudFormation submits the document.
"""

import logging
from typing import Sequence

from aws_cdk import aws_iam as iam

from stacks.common.constants import DEFAULT_POLICY_ID
from stacks.common.exceptions import ValidationError

logger = logging.getLogger(__name__)


class PolicyDocumentBuilder:
    """
    Builder that validates statement structure and assembles a document.

    ``iam.PolicyDocument`` renders no ``Id``; the builder carries the policy id
    so the attachment site can stamp it onto the rendered document.
    """

    def __init__(self, policy_id: str = DEFAULT_POLICY_ID):
        self.policy_id = policy_id

    def build(self, statements: Sequence[iam.PolicyStatement]) -> iam.PolicyDocument:
        """
        Assemble statements into a policy document.

        Args:
            statements: Ordered statements; order is kept in the output

        Returns:
            PolicyDocument ready to be attached to a resource

        Raises:
            ValidationError: If a statement is missing a required part
        """
        if not statements:
            raise ValidationError(
                "A policy document needs at least one statement",
                parameter_name="statements",
                provided_value="[]"
            )

        for index, statement in enumerate(statements):
            self._validate_statement(index, statement)

        document = iam.PolicyDocument(statements=list(statements))
        logger.debug(f"Built policy document '{self.policy_id}' with {len(statements)} statements")
        return document

    @staticmethod
    def _validate_statement(index: int, statement: iam.PolicyStatement) -> None:
        label = statement.sid or f"statement[{index}]"

        if not statement.principals:
            raise ValidationError(
                f"{label}: at least one principal is required",
                parameter_name="principals",
                provided_value="[]"
            )

        if not statement.actions:
            raise ValidationError(
                f"{label}: at least one action is required",
                parameter_name="actions",
                provided_value="[]"
            )

        if not statement.resources:
            raise ValidationError(
                f"{label}: at least one resource is required",
                parameter_name="resources",
                provided_value="[]"
            )

        for test, block in (statement.conditions or {}).items():
            if not block:
                raise ValidationError(
                    f"{label}: condition '{test}' has no variables",
                    parameter_name="conditions",
                    provided_value=str(test)
                )
            for variable, values in block.items():
                if values is None or values == "" or values == []:
                    raise ValidationError(
                        f"{label}: condition '{test}' on '{variable}' needs at least one value",
                        parameter_name="conditions",
                        provided_value=f"{test}:{variable}"
                    )
