"""Invocation permissions between an event source and a Lambda function."""

import logging

from aws_cdk import aws_lambda as lambda_

from stacks.common.exceptions import DuplicateResourceError, ValidationError

logger = logging.getLogger(__name__)


class InvocationPermissionBinder:
    """
    Grants invoke permissions on functions, one statement id per grant.

    Permissions are declared as children of the target function under their
    statement id, the way ``Function.add_permission`` does. A statement id
    collision is therefore reported while the graph is built, whichever binder
    declared the earlier grant, instead of when CloudFormation applies it.
    """

    def grant(self,
              action: str,
              target: lambda_.IFunction,
              principal: str,
              source_arn: str,
              statement_id: str) -> lambda_.CfnPermission:
        """
        Allow ``principal`` to perform ``action`` on ``target`` from ``source_arn``.

        Args:
            action: Lambda action, usually ``lambda:InvokeFunction``
            target: Function receiving the permission
            principal: Service principal of the caller
            source_arn: Exact ARN (pattern segments allowed) of the calling resource
            statement_id: Statement id, unique within the target's permissions

        Returns:
            The declared permission

        Raises:
            ValidationError: If a required argument is empty
            DuplicateResourceError: If the statement id is already used on the target
        """
        for name, value in (("action", action), ("principal", principal),
                            ("source_arn", source_arn), ("statement_id", statement_id)):
            if not value:
                raise ValidationError(f"{name} is required to grant an invocation permission",
                                      parameter_name=name)

        target_path = target.node.path
        if target.node.try_find_child(statement_id) is not None:
            raise DuplicateResourceError(
                f"Statement id '{statement_id}' is already granted on '{target_path}'",
                resource_type="AWS::Lambda::Permission",
                identifier=statement_id
            )

        permission = lambda_.CfnPermission(
            target,
            statement_id,
            action=action,
            function_name=target.function_name,
            principal=principal,
            source_arn=source_arn
        )

        logger.info(f"Granted {action} on {target_path} to {principal} ({statement_id})")
        return permission
