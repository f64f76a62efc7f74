"""site-deploy - versioned static website releases on object storage.

Uploads a pre-built static site to a bucket as an immutable release and
prints the load balancer changes needed to roll back to an older one.
"""

from .__version__ import __version__, __version_info__, __license__

# Exceptions
from .api.exceptions import (
    SiteDeployError,
    ConfigurationMissingError,
    ValidationError,
    BuildDirectoryNotFoundError,
    ReleaseAlreadyExistsError,
    CompressionError,
    NetworkOperationError,
    UploadVerificationError,
    ReleaseNotFoundError,
    StorageError,
    UserCancelledError,
)

# Core API
from .api.deployer import Deployer, deploy, rollback
from .api.query import cache_invalidation, list_releases

# Data models
from .models.config import DeployConfig, RetryPolicy
from .models.result import DeployResult, RollbackResult, ReleaseInfo

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__license__",

    # Main classes
    "Deployer",

    # Core API functions
    "deploy",
    "rollback",
    "list_releases",
    "cache_invalidation",

    # Data models
    "DeployConfig",
    "RetryPolicy",
    "DeployResult",
    "RollbackResult",
    "ReleaseInfo",

    # Exceptions
    "SiteDeployError",
    "ConfigurationMissingError",
    "ValidationError",
    "BuildDirectoryNotFoundError",
    "ReleaseAlreadyExistsError",
    "CompressionError",
    "NetworkOperationError",
    "UploadVerificationError",
    "ReleaseNotFoundError",
    "StorageError",
    "UserCancelledError",
]
