"""Account and region context shared by every ARN construction site."""

from dataclasses import dataclass

import aws_cdk as cdk

from .exceptions import StackConfigurationError, ValidationError
from .validators import ConfigValidator


@dataclass(frozen=True)
class AccountContext:
    """
    Deployment account and region, resolved once before any construct exists.

    Instances are immutable and passed by value into the stacks and binders
    that need to format ARNs.
    """

    account_id: str
    region: str

    def __post_init__(self) -> None:
        try:
            ConfigValidator.validate_account_id(self.account_id)
            ConfigValidator.validate_region(self.region)
        except ValidationError as e:
            raise StackConfigurationError(e.message, config_key=e.parameter_name) from e

    def to_environment(self) -> cdk.Environment:
        """Return the CDK stack environment for this account and region."""
        return cdk.Environment(account=self.account_id, region=self.region)
