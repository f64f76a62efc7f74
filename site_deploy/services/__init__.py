"""Service layer for site-deploy"""

from .config_service import ConfigProvider, ConfigService, NonInteractiveProvider
from .deploy_service import DeployService
from .rollback_service import RollbackService

__all__ = [
    'ConfigProvider',
    'ConfigService',
    'DeployService',
    'NonInteractiveProvider',
    'RollbackService',
]
