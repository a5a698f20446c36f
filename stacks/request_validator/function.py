"""
Validation function and its artifact storage.

The function archive is produced outside the stack; this construct only
copies it, unmodified and keyed by its fingerprint, into a private bucket and
points the function at the stored object.
"""

import logging
from typing import Dict, Optional

import aws_cdk as cdk
from aws_cdk import (
    Duration,
    RemovalPolicy,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
    aws_s3_deployment as s3_deployment,
)
from constructs import Construct

from helper.artifact import FunctionArtifact
from stacks.common.constants import (
    FUNCTION_ARTIFACT_KEY_PREFIX,
    FUNCTION_HANDLER,
    LAMBDA_BASIC_EXECUTION_POLICY,
    LAMBDA_SERVICE_PRINCIPAL
)

logger = logging.getLogger(__name__)


class RequestValidatorFunction(Construct):
    """Artifact bucket, execution role and the validation Lambda function."""

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 artifact: FunctionArtifact,
                 function_name: str,
                 environment: Optional[Dict[str, str]] = None,
                 log_group: Optional[logs.ILogGroup] = None,
                 runtime: lambda_.Runtime = lambda_.Runtime.PYTHON_3_12,
                 timeout_seconds: int = 10) -> None:
        """
        Initialize the validation function.

        Args:
            scope: CDK scope
            construct_id: Construct ID
            artifact: Packaged function code and its fingerprint
            function_name: Physical function name
            environment: Environment variables for the function
            log_group: Log group receiving the function logs
            runtime: Lambda runtime matching the artifact
            timeout_seconds: Function timeout
        """
        super().__init__(scope, construct_id)
        self.artifact = artifact

        self.artifact_bucket = s3.Bucket(
            self,
            "artifact-bucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True
        )

        self.artifact_deployment = s3_deployment.BucketDeployment(
            self,
            "artifact-deployment",
            sources=[s3_deployment.Source.asset(
                artifact.path,
                asset_hash=artifact.fingerprint,
                asset_hash_type=cdk.AssetHashType.CUSTOM
            )],
            destination_bucket=self.artifact_bucket,
            destination_key_prefix=FUNCTION_ARTIFACT_KEY_PREFIX,
            extract=False,
            prune=False
        )
        self.artifact_key = f"{FUNCTION_ARTIFACT_KEY_PREFIX}{cdk.Fn.select(0, self.artifact_deployment.object_keys)}"

        self.execution_role = iam.Role(
            self,
            "execution-role",
            assumed_by=iam.ServicePrincipal(LAMBDA_SERVICE_PRINCIPAL),
            description=f"Execution role for {function_name}",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(LAMBDA_BASIC_EXECUTION_POLICY)
            ]
        )

        # deployed_bucket resolves only after the copy finished, ordering the function after it
        self.function = lambda_.Function(
            self,
            "function",
            function_name=function_name,
            runtime=runtime,
            handler=FUNCTION_HANDLER,
            code=lambda_.Code.from_bucket(self.artifact_deployment.deployed_bucket, self.artifact_key),
            role=self.execution_role,
            environment=environment or {},
            log_group=log_group,
            timeout=Duration.seconds(timeout_seconds)
        )

        logger.info(f"Declared function {function_name} from artifact {artifact.fingerprint}")
