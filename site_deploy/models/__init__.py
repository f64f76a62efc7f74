"""Data models for site-deploy"""

from .config import (
    CacheConfig,
    DeployConfig,
    RetryPolicy,
    normalize_prefix,
    parse_extensions,
)
from .result import (
    CompressResult,
    DeployResult,
    DeployStage,
    ErrorDetail,
    OperationStatus,
    ReleaseInfo,
    RepointInstructions,
    Result,
    RollbackResult,
    RollbackStage,
    SyncReport,
    UploadResult,
)

__all__ = [
    # Config models
    'CacheConfig',
    'DeployConfig',
    'RetryPolicy',
    'normalize_prefix',
    'parse_extensions',

    # Result models
    'CompressResult',
    'DeployResult',
    'DeployStage',
    'ErrorDetail',
    'OperationStatus',
    'ReleaseInfo',
    'RepointInstructions',
    'Result',
    'RollbackResult',
    'RollbackStage',
    'SyncReport',
    'UploadResult',
]
