"""
Constants used across CDK stacks.
"""

# Service principals
SNS_SERVICE_PRINCIPAL = "sns.amazonaws.com"
LAMBDA_SERVICE_PRINCIPAL = "lambda.amazonaws.com"
API_GATEWAY_SERVICE_PRINCIPAL = "apigateway.amazonaws.com"

# Policy language
DEFAULT_POLICY_ID = "__default_policy_ID"
OWNER_STATEMENT_SID = "__owner_statement"
PUBLISHER_STATEMENT_SID = "__publisher_statement"
SOURCE_ARN_CONDITION_KEY = "aws:SourceArn"

# Queue defaults (reference topology)
DEFAULT_MAX_MESSAGE_SIZE_BYTES = 2048
DEFAULT_RETENTION_SECONDS = 86400  # one day
DEFAULT_RECEIVE_WAIT_SECONDS = 10
DEFAULT_MODEL_IDS = ["a", "b", "c"]

# Resource name suffixes (prefixed with the project name)
INPUT_TOPIC_SUFFIX = "topic.fifo"
OUTPUT_TOPIC_SUFFIX = "output-topic.fifo"
INPUT_QUEUE_SUFFIX_TEMPLATE = "input-sqs-model-{model_id}.fifo"
OUTPUT_QUEUE_SUFFIX = "output-sqs.fifo"

# Validation function
FUNCTION_ARTIFACT_KEY_PREFIX = "request_validator_lambda/"
FUNCTION_HANDLER = "index.handler"
DEFAULT_FUNCTION_ARTIFACT_PATH = "./lambda/request_validator"
LAMBDA_BASIC_EXECUTION_POLICY = "service-role/AWSLambdaBasicExecutionRole"
LAMBDA_INVOKE_ACTION = "lambda:InvokeFunction"
API_INVOKE_STATEMENT_ID = "AllowExecutionFromAPIGateway"

# API front end
DEFAULT_API_RESOURCE_PATH_PART = "resource"
DEFAULT_API_HTTP_METHOD = "GET"
DEFAULT_API_STAGE_NAME = "prod"
API_INTEGRATION_HTTP_METHOD = "POST"
ANY_STAGE = "*"

# Logging
DEFAULT_LOG_RETENTION_DAYS = 30
