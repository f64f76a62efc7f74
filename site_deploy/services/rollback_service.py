"""Rollback orchestration service"""

import logging
from typing import List, Optional

from .config_service import ConfigProvider, NonInteractiveProvider
from ..api.exceptions import ConfigurationMissingError, SiteDeployError, UserCancelledError
from ..constants import INDEX_DOCUMENT, MSG_ROLLBACK_READY, PROMPT_CONFIRM_PRODUCTION_ROLLBACK
from ..core.release_lister import ReleaseLister
from ..core.rollback_advisor import RollbackAdvisor
from ..models.config import DeployConfig
from ..models.result import OperationStatus, ReleaseInfo, RollbackResult, RollbackStage
from ..storage.base import StorageBackend
from ..storage.factory import StorageFactory


class RollbackService:
    """Selects an existing release and emits repoint instructions for it"""

    def __init__(self,
                 config: DeployConfig,
                 provider: Optional[ConfigProvider] = None,
                 storage: Optional[StorageBackend] = None):
        self.config = config
        self.provider = provider or NonInteractiveProvider()
        self.storage = storage or StorageFactory.create_from_config(config)
        self.lister = ReleaseLister(self.storage, config.releases_prefix, config.retry)
        self.advisor = RollbackAdvisor(self.lister, config)
        self.logger = logging.getLogger(self.__class__.__name__)

    async def list_releases(self) -> List[ReleaseInfo]:
        try:
            return await self.lister.list_releases()
        finally:
            await self.storage.close()

    async def rollback(self, version: Optional[str] = None) -> RollbackResult:
        """
        Prepare a rollback to ``version``

        Args:
            version: Release version; the provider is asked when omitted

        Returns:
            RollbackResult with repoint instructions, or a cancelled or
            failed result
        """
        result = RollbackResult(version=version)
        try:
            await self._run(result, version)
        except UserCancelledError as e:
            self.logger.warning(str(e))
            result.cancel(str(e))
        except SiteDeployError as e:
            self.logger.error(f"Rollback failed during {result.stage.value}: {e}")
            result.abort(e)
        finally:
            await self.storage.close()
        return result

    async def _run(self, result: RollbackResult, version: Optional[str]) -> None:
        result.stage = RollbackStage.LISTING
        result.releases = await self.lister.list_releases()

        result.stage = RollbackStage.SELECTING_RELEASE
        if not version:
            if not result.releases:
                self.logger.warning(f"No releases found under {self.config.releases_prefix}")
            version = self.provider.choose_release(result.releases)
            if not version:
                raise UserCancelledError("No release selected")
        result.version = version = version.strip().strip('/')
        if not version:
            raise ConfigurationMissingError("Release version is required", key="version")

        result.stage = RollbackStage.VERIFYING_RELEASE_EXISTS
        release, count, has_index = await self.advisor.verify_release(version)
        result.release = release
        result.object_count = count
        result.has_index = has_index
        if not has_index:
            result.add_warning(f"Release {version} may be incomplete (no {INDEX_DOCUMENT} found)")
            if not self.provider.confirm("Continue anyway?", default=False):
                raise UserCancelledError("Rollback cancelled")

        if self.config.is_production:
            result.stage = RollbackStage.CONFIRMING_PRODUCTION_INTENT
            if not self.provider.confirm_typed(PROMPT_CONFIRM_PRODUCTION_ROLLBACK, "yes"):
                raise UserCancelledError("Rollback cancelled")
        elif not self.provider.confirm("Proceed with rollback?", default=True):
            raise UserCancelledError("Rollback cancelled")

        result.stage = RollbackStage.EMITTING_REPOINT_INSTRUCTIONS
        result.instructions = self.advisor.instructions(release)

        result.stage = RollbackStage.DONE
        result.message = MSG_ROLLBACK_READY.format(version=version)
        result.complete(OperationStatus.SUCCESS)
