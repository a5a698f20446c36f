import os
import re
import logging
import yaml
from yaml.loader import SafeLoader
from typing import Dict, List, Optional, Any

logger = logging.getLogger(__name__)


class ProjectNameValidationError(Exception):
    """Raised when ProjectName validation fails."""
    pass


class Config:

    _environment = 'development'
    data = []

    def __init__(self, environment, config_dir: str = 'config') -> None:
        self._environment = environment
        self._config_dir = config_dir
        self.load()
        self._validate_project_name()

    def load(self) -> dict:
        with open(os.path.join(self._config_dir, f'{self._environment}.yaml'), encoding='utf-8') as f:
            self.data = yaml.load(f, Loader=SafeLoader) or {}
        return self.data

    def get(self, key):
        return self.data[key]

    def _validate_project_name(self) -> None:
        """
        Validate ProjectName against the naming constraints of every resource it prefixes.

        Raises:
            ProjectNameValidationError: If ProjectName doesn't meet requirements
        """
        project_name = self.data.get('ProjectName')

        if not project_name:
            raise ProjectNameValidationError("ProjectName is required in configuration")

        if not isinstance(project_name, str):
            raise ProjectNameValidationError("ProjectName must be a string")

        project_name = project_name.strip()

        if not project_name:
            raise ProjectNameValidationError("ProjectName cannot be empty or whitespace only")

        # 1. LENGTH CONSTRAINTS (Most Restrictive: SQS queue names = 80 chars max)
        # Longest suffix: "-input-sqs-model-" (17) + model id (up to 20) + ".fifo" (5) = 42 chars
        MAX_LENGTH = 38

        if len(project_name) > MAX_LENGTH:
            raise ProjectNameValidationError(
                f"ProjectName must be {MAX_LENGTH} characters or less. "
                f"Current length: {len(project_name)}. "
                f"Constraint: SQS queue names (80 chars) - longest input queue suffix"
            )

        # 2. MINIMUM LENGTH
        MIN_LENGTH = 3

        if len(project_name) < MIN_LENGTH:
            raise ProjectNameValidationError(
                f"ProjectName must be at least {MIN_LENGTH} characters long. "
                f"Current length: {len(project_name)}"
            )

        # 3. CHARACTER PATTERN (CloudFormation stack + S3 bucket prefix)
        combined_pattern = r'^[a-z]([a-z0-9-]*[a-z0-9])?$'

        if not re.match(combined_pattern, project_name):
            raise ProjectNameValidationError(
                f"ProjectName '{project_name}' contains invalid characters. "
                f"Must use only lowercase letters (a-z), numbers (0-9), and hyphens (-). "
                f"Must start with a letter and end with a letter or number"
            )

        # 4. CONSECUTIVE HYPHENS CHECK (S3 requirement)
        if '--' in project_name:
            raise ProjectNameValidationError(
                f"ProjectName '{project_name}' contains consecutive hyphens. "
                f"S3 bucket naming does not allow consecutive hyphens"
            )

        # 5. RESERVED PATTERNS CHECK
        reserved_patterns = ['aws', 'amazon', 'amzn', 'sns', 'sqs', 'lambda']

        if project_name.lower() in reserved_patterns:
            raise ProjectNameValidationError(
                f"ProjectName '{project_name}' conflicts with reserved patterns: {reserved_patterns}"
            )

    def get_project_name(self) -> str:
        return self.data['ProjectName'].strip()

    def resolve_account_context(self):
        """
        Resolve the deployment account and region exactly once.

        Lookup order for each value: configuration file, environment
        variables, then (account only) the caller identity of the current
        AWS credentials.

        Returns:
            AccountContext with validated account id and region

        Raises:
            StackConfigurationError: If either value is missing or malformed
        """
        from stacks.common.context import AccountContext
        from stacks.common.exceptions import StackConfigurationError

        region = (
            self.data.get('RegionName')
            or os.environ.get('AWS_REGION')
            or os.environ.get('CDK_DEFAULT_REGION')
        )
        if not region:
            raise StackConfigurationError(
                "Region is not configured. Set RegionName or AWS_REGION",
                config_key='RegionName'
            )

        account_id = (
            self.data.get('AccountId')
            or os.environ.get('AWS_ACCOUNT_ID')
            or os.environ.get('CDK_DEFAULT_ACCOUNT')
        )
        if not account_id:
            account_id = self._lookup_caller_account()

        # YAML loads unquoted account ids as integers
        if isinstance(account_id, int):
            account_id = str(account_id).zfill(12)

        context = AccountContext(account_id=account_id, region=region)
        logger.info(f"Resolved deployment context: account={context.account_id} region={context.region}")
        return context

    def _lookup_caller_account(self) -> str:
        """Ask STS for the account of the active credentials."""
        import boto3
        from botocore.exceptions import BotoCoreError, ClientError
        from stacks.common.exceptions import StackConfigurationError

        try:
            return boto3.client('sts').get_caller_identity()['Account']
        except (BotoCoreError, ClientError) as e:
            raise StackConfigurationError(
                f"Account id is not configured and could not be resolved from credentials: {str(e)}",
                config_key='AccountId'
            ) from e

    def get_model_ids(self) -> List[str]:
        """
        Get the enumerated model identifiers that each own an input queue.

        The defaults apply only when ModelIds is absent; an empty list is
        passed through so the topology rejects it.

        Raises:
            StackConfigurationError: If ModelIds is not a list
        """
        from stacks.common.constants import DEFAULT_MODEL_IDS
        from stacks.common.exceptions import StackConfigurationError

        model_ids = self.data.get('ModelIds')
        if model_ids is None:
            return list(DEFAULT_MODEL_IDS)
        if not isinstance(model_ids, list):
            raise StackConfigurationError(
                f"ModelIds must be a list of model ids, got {type(model_ids).__name__}",
                config_key='ModelIds'
            )
        return [str(model_id) for model_id in model_ids]

    def get_queue_defaults(self) -> Dict[str, Any]:
        """Get queue attribute defaults applied to every queue."""
        return self.data.get('QueueDefaults') or {}

    def get_queue_overrides(self) -> Dict[str, Dict[str, Any]]:
        """Get per-model input queue attribute overrides keyed by model id."""
        overrides = self._get_mapping('QueueOverrides')
        return {str(model_id): values or {} for model_id, values in overrides.items()}

    def get_output_queue_overrides(self) -> Dict[str, Any]:
        """Get attribute overrides of the output queue."""
        return self._get_mapping('OutputQueueOverrides')

    def _get_mapping(self, key: str) -> Dict[str, Any]:
        from stacks.common.exceptions import StackConfigurationError

        value = self.data.get(key) or {}
        if not isinstance(value, dict):
            raise StackConfigurationError(
                f"{key} must be a mapping, got {type(value).__name__}",
                config_key=key
            )
        return value

    def get_function_environment(self) -> Dict[str, str]:
        """Get environment variables for the validation function."""
        return self.data.get('FunctionEnvironment') or {}

    def get_function_artifact_path(self) -> str:
        from stacks.common.constants import DEFAULT_FUNCTION_ARTIFACT_PATH
        return self.data.get('FunctionArtifactPath') or DEFAULT_FUNCTION_ARTIFACT_PATH

    def get_api_stage_name(self) -> str:
        from stacks.common.constants import DEFAULT_API_STAGE_NAME
        return self.data.get('ApiStageName') or DEFAULT_API_STAGE_NAME

    def get_log_retention_days(self) -> int:
        from stacks.common.constants import DEFAULT_LOG_RETENTION_DAYS
        return int(self.data.get('LogRetentionDays') or DEFAULT_LOG_RETENTION_DAYS)

    def is_cdk_nag_enabled(self) -> bool:
        """Check if cdk-nag AwsSolutions checks should run during synth."""
        return bool(self.data.get('EnableCdkNag', False))

    def get_optional(self, key: str, default_value: Optional[Any] = None) -> Any:
        return self.data.get(key, default_value)
