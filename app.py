#!/usr/bin/env python3

import logging

import aws_cdk as cdk
from helper import config
from helper.artifact import FunctionArtifact
from stacks import DeploymentGraphStack
from cdk_nag import ( AwsSolutionsChecks, NagSuppressions )

logging.basicConfig(level=logging.INFO)

app = cdk.App()

conf = config.Config(app.node.try_get_context('environment') or 'development')

# Use ProjectName for all stack naming
project_name = conf.get_project_name()

# Account and region are resolved once, before any construct is declared
account_context = conf.resolve_account_context()
artifact = FunctionArtifact.from_path(conf.get_function_artifact_path())

deployment_stack = DeploymentGraphStack(app, f"{project_name}-deployment",
                                        config=conf,
                                        context=account_context,
                                        artifact=artifact
                                        )

if conf.is_cdk_nag_enabled():
    cdk.Aspects.of(app).add(AwsSolutionsChecks())

# Suppressions for accepted patterns of the routing topology
NagSuppressions.add_stack_suppressions(deployment_stack, [
    {"id": "AwsSolutions-SQS3", "reason": "Queues are consumed by model workers that manage their own retries; no DLQ is provisioned"},
    {"id": "AwsSolutions-SQS4", "reason": "Queue policies are generated with one owner and one source-scoped publisher statement only"},
    {"id": "AwsSolutions-SNS2", "reason": "Topics carry routing envelopes only; server-side encryption is not configured"},
    {"id": "AwsSolutions-SNS3", "reason": "Topic publishers are scoped through the subscribed queue policies"},
    {"id": "AwsSolutions-S1", "reason": "Artifact bucket only stores the content-addressed function archive"},
    {"id": "AwsSolutions-APIG1", "reason": "Access logging is not configured for the validation API"},
    {"id": "AwsSolutions-APIG2", "reason": "Request validation is performed by the validation function itself"},
    {"id": "AwsSolutions-APIG3", "reason": "WAF is not attached to the validation API"},
    {"id": "AwsSolutions-APIG4", "reason": "The validation endpoint is intentionally unauthenticated"},
    {"id": "AwsSolutions-APIG6", "reason": "Execution logging is not configured for the validation API stage"},
    {"id": "AwsSolutions-COG4", "reason": "The validation endpoint is intentionally unauthenticated"},
    {"id": "AwsSolutions-L1", "reason": "Bucket deployment helper functions are managed by CDK"},
    {"id": "AwsSolutions-IAM4", "reason": "Lambda functions use the AWS managed basic execution role",
     "appliesTo": ["Policy::arn:<AWS::Partition>:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"]},
    {"id": "AwsSolutions-IAM5", "reason": "Bucket deployment helper requires object-level wildcards on the asset and artifact buckets"},
])

app.synth()
