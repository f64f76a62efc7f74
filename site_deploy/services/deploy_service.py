"""Deploy orchestration service"""

import logging
from pathlib import Path
from typing import Optional

from .config_service import ConfigProvider, NonInteractiveProvider
from ..api.exceptions import (
    BuildDirectoryNotFoundError,
    NetworkOperationError,
    SiteDeployError,
    StorageError,
    UserCancelledError,
)
from ..constants import (
    ERROR_DOCUMENT,
    INDEX_DOCUMENT,
    PROMPT_CONFIRM_DEPLOY,
    PROMPT_CONFIRM_UPLOAD,
    WRITE_CHECK_KEY,
)
from ..core.compressor import Compressor
from ..core.conflict_guard import ConflictGuard
from ..core.content_types import ContentTypeTable
from ..core.release_lister import ReleaseLister
from ..core.release_namer import ReleaseNamer
from ..core.rollback_advisor import RollbackAdvisor
from ..core.uploader import Uploader
from ..models.config import DeployConfig
from ..models.result import DeployResult, DeployStage, OperationStatus, ReleaseInfo
from ..storage.base import StorageBackend
from ..storage.factory import StorageFactory
from ..utils.async_utils import retry_async
from ..utils.file_utils import TempFileTracker, format_size, scan_directory


class DeployService:
    """Runs a deploy from build directory to verified release"""

    def __init__(self,
                 config: DeployConfig,
                 provider: Optional[ConfigProvider] = None,
                 storage: Optional[StorageBackend] = None,
                 namer: Optional[ReleaseNamer] = None):
        """
        Initialize deploy service

        Args:
            config: Effective deploy configuration
            provider: Answers confirmations (non-interactive by default)
            storage: Storage backend (created from config when omitted)
            namer: Release namer (git lookups in the project root by default)
        """
        self.config = config
        self.provider = provider or NonInteractiveProvider()
        self.storage = storage or StorageFactory.create_from_config(config)
        self.namer = namer or ReleaseNamer(config.project_root)
        self.content_types = ContentTypeTable(config.content_types)
        self.logger = logging.getLogger(self.__class__.__name__)

    async def deploy(self) -> DeployResult:
        """
        Deploy the build directory as a release

        Returns:
            DeployResult. Fatal errors are recorded on the result with the
            stage they happened in; cancellation yields a cancelled result.
        """
        result = DeployResult(bucket=self.config.bucket)

        # Local temp files are removed on every exit path, remote state is kept
        with TempFileTracker() as tracker:
            try:
                await self._run(result, tracker)
            except UserCancelledError as e:
                self.logger.warning(str(e))
                result.cancel(str(e))
            except SiteDeployError as e:
                self.logger.error(f"Deployment failed during {result.stage.value}: {e}")
                result.abort(e)
            finally:
                await self.storage.close()

        return result

    async def _run(self, result: DeployResult, tracker: TempFileTracker) -> None:
        config = self.config
        policy = config.retry

        result.stage = DeployStage.CONFIGURING
        build_dir = self._validate_build_dir(result)

        result.stage = DeployStage.NAMING
        result.version = self.namer.resolve(config.version)
        result.prefix = config.release_prefix(result.version)
        self.logger.info(f"Release {result.version} -> {self.storage.location}/{result.prefix}")

        result.stage = DeployStage.CONFLICT_CHECK
        bucket_exists = await retry_async(
            self.storage.bucket_exists, policy=policy, step=f"Check bucket {config.bucket}"
        )
        if bucket_exists:
            await ConflictGuard(self.storage, policy).check(result.prefix)
        else:
            self.logger.info("Bucket does not exist yet, no release conflicts possible")

        if not self.provider.confirm_typed(PROMPT_CONFIRM_DEPLOY, "yes"):
            raise UserCancelledError("Deployment cancelled")

        if not bucket_exists:
            await self._create_bucket()
        await self._check_write_access(tracker)

        result.stage = DeployStage.COMPRESSING
        compressor = Compressor(config.gzip_extensions)
        result.compression = compressor.compress(build_dir, tracker)
        for warning in result.compression.warnings:
            result.add_warning(warning)
        if result.compression.failed:
            result.add_warning(f"{result.compression.failed_count} file(s) could not be compressed")

        files = scan_directory(build_dir)
        total = sum(f.stat().st_size for f in files)
        self.logger.info(f"About to upload {len(files)} file(s) ({format_size(total)}) "
                         f"to {self.storage.location}/{result.prefix}")
        if not self.provider.confirm_typed(PROMPT_CONFIRM_UPLOAD, "DEPLOY"):
            raise UserCancelledError("Upload cancelled")

        result.stage = DeployStage.UPLOADING
        uploader = Uploader(
            self.storage,
            content_types=self.content_types,
            cache=config.cache,
            retry_policy=policy,
            delete_extraneous=config.delete_extraneous,
            protected_prefixes=[config.releases_prefix],
            sync_log=config.sync_log
        )
        result.upload = await uploader.upload(
            build_dir,
            result.prefix,
            result.compression.compressed,
            verify=False,
            reused=result.compression.reused
        )

        result.stage = DeployStage.VERIFYING
        await uploader.verify(result.prefix)
        result.upload.verified = True

        lister = ReleaseLister(self.storage, config.releases_prefix, policy)
        if config.url_map and result.prefix:
            release = ReleaseInfo(version=result.version, prefix=result.prefix)
            result.instructions = RollbackAdvisor(lister, config).instructions(release)
        elif result.prefix:
            self.logger.info("Load balancer update instructions not shown (DEPLOY_URL_MAP_NAME not set)")

        result.stage = DeployStage.LISTING
        try:
            result.releases = await lister.list_releases()
        except NetworkOperationError as e:
            result.add_warning(f"Could not list releases: {e}")

        result.stage = DeployStage.DONE
        result.message = f"Deployed release {result.version}"
        result.complete(OperationStatus.SUCCESS)

    def _validate_build_dir(self, result: DeployResult) -> Path:
        build_dir = Path(self.config.build_dir)
        if not build_dir.is_dir():
            corrected = self.provider.corrected_build_dir(build_dir)
            if corrected is None or not Path(corrected).is_dir():
                raise BuildDirectoryNotFoundError(str(corrected or build_dir))
            build_dir = Path(corrected)
            self.config.build_dir = build_dir

        if not any(p.is_file() for p in build_dir.rglob('*')):
            raise BuildDirectoryNotFoundError(f"{build_dir} (directory is empty)")

        if not (build_dir / INDEX_DOCUMENT).exists():
            message = f"No {INDEX_DOCUMENT} found in build directory"
            self.logger.warning(message)
            result.add_warning(message)
        return build_dir

    async def _create_bucket(self) -> None:
        bucket = self.config.bucket
        self.logger.warning(f"Bucket does not exist: {bucket}")
        if not self.provider.confirm(f"Create bucket {bucket}?", default=False):
            raise UserCancelledError("Deployment cancelled, bucket was not created")

        await retry_async(self.storage.create_bucket, policy=self.config.retry, step=f"Create bucket {bucket}")
        self.logger.info(f"Bucket created: {bucket}")

        if not self.config.website_hosting:
            return
        await retry_async(
            self.storage.configure_website,
            INDEX_DOCUMENT,
            ERROR_DOCUMENT,
            public_read=self.config.public_read,
            policy=self.config.retry,
            step=f"Configure website hosting for {bucket}"
        )
        if self.config.public_read:
            self.logger.warning(f"Bucket {bucket} is now publicly readable")

    async def _check_write_access(self, tracker: TempFileTracker) -> None:
        check_file = tracker.make_temp_file(suffix=".txt", content=b"site-deploy write check\n")
        try:
            await retry_async(
                self.storage.check_write_access,
                check_file,
                WRITE_CHECK_KEY,
                policy=self.config.retry,
                step="Check bucket write access"
            )
        except NetworkOperationError as e:
            raise StorageError(f"Cannot write to bucket {self.config.bucket}: {e.cause or e}") from e
