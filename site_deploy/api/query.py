"""Query API for uploaded releases"""

from pathlib import Path
from typing import Any, List, Optional

from ..core.rollback_advisor import DEFAULT_INVALIDATION_PATH, invalidation_command
from ..models.result import ReleaseInfo
from ..services.config_service import ConfigProvider, ConfigService
from ..services.rollback_service import RollbackService
from ..storage.base import StorageBackend
from ..utils.async_utils import run_async


def list_releases(project_root: Optional[Path] = None,
                  environment: Optional[str] = None,
                  provider: Optional[ConfigProvider] = None,
                  storage: Optional[StorageBackend] = None,
                  **overrides: Any) -> List[ReleaseInfo]:
    """
    List releases under the releases prefix

    Args:
        project_root: Directory holding the configuration files
        environment: Environment name
        provider: Provider used for missing values
        storage: Storage backend override
        **overrides: Configuration fields

    Returns:
        Releases in storage order
    """
    config = ConfigService(project_root, environment, provider).resolve(overrides, required=('bucket',))
    service = RollbackService(config, provider, storage=storage)
    return run_async(service.list_releases())


def cache_invalidation(path_pattern: str = DEFAULT_INVALIDATION_PATH,
                       project_root: Optional[Path] = None,
                       environment: Optional[str] = None,
                       provider: Optional[ConfigProvider] = None,
                       **overrides: Any) -> str:
    """``gcloud`` command that invalidates the CDN cache for ``path_pattern``"""
    config = ConfigService(project_root, environment, provider).resolve(
        overrides, required=('url_map',)
    )
    return invalidation_command(config.url_map, path_pattern, config.project_id)
