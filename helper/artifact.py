"""Content-addressed reference to the packaged validation function."""

import os
from dataclasses import dataclass

import aws_cdk as cdk


@dataclass(frozen=True)
class FunctionArtifact:
    """
    Path and fingerprint of a function archive or source directory.

    The fingerprint is used as the asset hash, so identical contents always
    produce the same object key and an unchanged template.
    """

    path: str
    fingerprint: str

    @classmethod
    def from_path(cls, path: str) -> 'FunctionArtifact':
        """Fingerprint a file or directory the same way CDK fingerprints assets."""
        if not os.path.exists(path):
            from stacks.common.exceptions import StackConfigurationError
            raise StackConfigurationError(
                f"Function artifact path does not exist: {path}",
                config_key='FunctionArtifactPath'
            )
        absolute_path = os.path.abspath(path)
        return cls(path=absolute_path, fingerprint=cdk.FileSystem.fingerprint(absolute_path))
