"""Public API for site-deploy"""

from .exceptions import (
    BuildDirectoryNotFoundError,
    CompressionError,
    ConfigurationMissingError,
    NetworkOperationError,
    ReleaseAlreadyExistsError,
    ReleaseNotFoundError,
    SiteDeployError,
    StorageError,
    UploadVerificationError,
    UserCancelledError,
    ValidationError,
)
from .deployer import Deployer, deploy, resolve_config, rollback
from .query import cache_invalidation, list_releases

__all__ = [
    # Main classes
    'Deployer',

    # Convenience functions
    'cache_invalidation',
    'deploy',
    'list_releases',
    'resolve_config',
    'rollback',

    # Exceptions
    'BuildDirectoryNotFoundError',
    'CompressionError',
    'ConfigurationMissingError',
    'NetworkOperationError',
    'ReleaseAlreadyExistsError',
    'ReleaseNotFoundError',
    'SiteDeployError',
    'StorageError',
    'UploadVerificationError',
    'UserCancelledError',
    'ValidationError',
]
