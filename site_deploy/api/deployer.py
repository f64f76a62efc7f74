"""Deployer API for deploy and rollback operations"""

from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import SiteDeployError
from ..models.result import DeployResult, RollbackResult
from ..services.config_service import ConfigProvider, ConfigService
from ..services.deploy_service import DeployService
from ..services.rollback_service import RollbackService
from ..storage.base import StorageBackend
from ..utils.async_utils import run_async


class Deployer:
    """Deployer class for deploy and rollback operations"""

    def __init__(self,
                 project_root: Optional[Path] = None,
                 environment: Optional[str] = None,
                 provider: Optional[ConfigProvider] = None,
                 storage: Optional[StorageBackend] = None):
        """
        Initialize deployer

        Args:
            project_root: Directory holding ``.env`` files and ``.site-deploy.yaml``
            environment: Environment name (selects ``.env.<environment>``)
            provider: Interactive or non-interactive provider
            storage: Storage backend override, mainly for tests
        """
        self.config_service = ConfigService(project_root, environment, provider)
        self.provider = self.config_service.provider
        self.storage = storage

    def deploy(self, raise_on_error: bool = False, **overrides: Any) -> DeployResult:
        """
        Deploy the build directory as a release

        Args:
            raise_on_error: Raise the recorded error instead of returning a failed result
            **overrides: Configuration fields (bucket, version, release_path, ...)

        Returns:
            DeployResult: Deployment result

        Raises:
            SiteDeployError: If ``raise_on_error`` is set and the deploy failed
        """
        try:
            config = self.config_service.resolve(overrides)
        except SiteDeployError as e:
            result = DeployResult(bucket=overrides.get('bucket'))
            result.abort(e)
            return self._finish(result, raise_on_error)

        service = DeployService(config, self.provider, storage=self.storage)
        return self._finish(run_async(service.deploy()), raise_on_error)

    def rollback(self,
                 version: Optional[str] = None,
                 raise_on_error: bool = False,
                 **overrides: Any) -> RollbackResult:
        """
        Prepare a rollback to an existing release

        Args:
            version: Release version to roll back to
            raise_on_error: Raise the recorded error instead of returning a failed result
            **overrides: Configuration fields

        Returns:
            RollbackResult: Rollback result with repoint instructions
        """
        try:
            config = self.config_service.resolve(overrides)
        except SiteDeployError as e:
            result = RollbackResult(version=version)
            result.abort(e)
            return self._finish(result, raise_on_error)

        service = RollbackService(config, self.provider, storage=self.storage)
        return self._finish(run_async(service.rollback(version)), raise_on_error)

    @staticmethod
    def _finish(result, raise_on_error: bool):
        if raise_on_error and result.exception is not None:
            raise result.exception
        return result


def deploy(project_root: Optional[Path] = None,
           environment: Optional[str] = None,
           provider: Optional[ConfigProvider] = None,
           **overrides: Any) -> DeployResult:
    """Deploy with a one-off Deployer"""
    return Deployer(project_root, environment, provider).deploy(**overrides)


def rollback(version: Optional[str] = None,
             project_root: Optional[Path] = None,
             environment: Optional[str] = None,
             provider: Optional[ConfigProvider] = None,
             **overrides: Any) -> RollbackResult:
    """Prepare a rollback with a one-off Deployer"""
    return Deployer(project_root, environment, provider).rollback(version, **overrides)


def resolve_config(project_root: Optional[Path] = None,
                   environment: Optional[str] = None,
                   **overrides: Any) -> Dict[str, Any]:
    """Effective configuration as a plain dict, for display"""
    return ConfigService(project_root, environment).resolve(overrides, required=()).to_dict()
