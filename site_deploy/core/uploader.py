"""Multi-pass upload of a build directory to a release prefix"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .content_types import ContentTypeTable, strip_gzip_suffix
from ..api.exceptions import UploadVerificationError
from ..constants import (
    CACHE_CONTROL_TEMPLATE,
    CONTENT_ENCODING_GZIP,
    HTML_CONTENT_TYPE,
    HTML_EXTENSIONS,
    INDEX_DOCUMENT,
)
from ..models.config import CacheConfig, RetryPolicy
from ..models.result import OperationStatus, UploadResult
from ..storage.base import StorageBackend
from ..utils.async_utils import retry_async
from ..utils.file_utils import file_extension, relative_key, safe_remove, scan_directory

TRANSCRIPT_LOGGER = "site_deploy.sync"


def cache_control(max_age: int) -> str:
    return CACHE_CONTROL_TEMPLATE.format(max_age=max_age)


class Uploader:
    """Uploads a build directory in four ordered passes

    1. bulk sync of non-HTML files, then a long Cache-Control patch
    2. compressed non-HTML files under their original key, gzip encoded
    3. HTML files with a short Cache-Control
    4. compressed HTML files under their original key, gzip encoded

    Each pass finishes before the next one starts.
    """

    def __init__(self,
                 storage: StorageBackend,
                 content_types: Optional[ContentTypeTable] = None,
                 cache: Optional[CacheConfig] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 delete_extraneous: bool = False,
                 protected_prefixes: Iterable[str] = (),
                 sync_log: Optional[Path] = None):
        """
        Args:
            storage: Target storage backend
            content_types: Media type table
            cache: Cache lifetimes
            retry_policy: Policy applied to every remote call
            delete_extraneous: Remove remote objects missing locally (root only)
            protected_prefixes: Prefixes never removed by the root sync
            sync_log: File receiving the bulk sync transcript
        """
        self.storage = storage
        self.content_types = content_types or ContentTypeTable()
        self.cache = cache or CacheConfig()
        self.retry_policy = retry_policy or RetryPolicy()
        self.delete_extraneous = delete_extraneous
        self.protected_prefixes = list(protected_prefixes)
        self.sync_log = Path(sync_log) if sync_log else None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _retry(self, step: str, func, *args, **kwargs):
        return await retry_async(func, *args, policy=self.retry_policy, step=step, **kwargs)

    def partition(self,
                  build_dir: Path,
                  intermediates: Iterable[Path],
                  reused: Iterable[Path] = ()) -> Tuple[List[Path], List[Path], List[Path], List[Path]]:
        """Split the build into assets, compressed assets, HTML and compressed HTML

        Both created intermediates and reused ``.gz`` siblings count as
        compressed variants and are kept out of the bulk sync.
        """
        variants = sorted(set(Path(p) for p in intermediates) | set(Path(p) for p in reused))

        assets, html = [], []
        for path in scan_directory(build_dir, exclude=set(variants)):
            (html if file_extension(path) in HTML_EXTENSIONS else assets).append(path)

        compressed_assets, compressed_html = [], []
        for path in variants:
            if not path.exists():
                continue
            (compressed_html if self.content_types.is_html(path) else compressed_assets).append(path)

        return assets, compressed_assets, html, compressed_html

    async def upload(self,
                     build_dir: Path,
                     prefix: str,
                     intermediates: Iterable[Path] = (),
                     verify: bool = True,
                     reused: Iterable[Path] = ()) -> UploadResult:
        """
        Upload ``build_dir`` under ``prefix``

        Args:
            build_dir: Build output directory
            prefix: Normalized release prefix, empty for the bucket root
            intermediates: Compression intermediates created for this run
            verify: Check the prefix once all passes are done
            reused: Shipped ``.gz`` siblings uploaded as compressed variants, never removed

        Returns:
            UploadResult with per-pass counters

        Raises:
            NetworkOperationError: A remote call failed after retries
            UploadVerificationError: Nothing could be found under the prefix
        """
        build_dir = Path(build_dir)
        intermediates = list(intermediates)
        result = UploadResult(bucket=self.storage.location, prefix=prefix, sync_log=self.sync_log)

        assets, compressed_assets, html, compressed_html = self.partition(build_dir, intermediates, reused)
        long_cache = cache_control(self.cache.max_age)
        short_cache = cache_control(self.cache.html_max_age)

        # Pass 1: bulk sync of regular assets
        delete = self.delete_extraneous and not prefix
        if self.delete_extraneous and prefix:
            self.logger.info("Extraneous object removal only applies to root deploys, skipping")
        keep_keys = [prefix + relative_key(p, build_dir) for p in html]
        keep_keys += [prefix + strip_gzip_suffix(relative_key(p, build_dir)) for p in compressed_assets + compressed_html]

        self.logger.info(f"Syncing {len(assets)} asset(s) to {self.storage.location}/{prefix}")
        with self._transcript() as transcript:
            result.sync = await self._retry(
                "Bulk sync",
                self.storage.sync_directory,
                build_dir,
                prefix,
                assets,
                self.content_types.for_file,
                delete_extraneous=delete,
                keep_keys=keep_keys,
                protected_prefixes=self.protected_prefixes,
                transcript=transcript
            )
        if result.sync.deleted:
            self.logger.info(f"Removed {len(result.sync.deleted)} extraneous object(s)")

        for key in result.sync.keys:
            await self._retry(f"Set cache metadata for {key}", self.storage.set_metadata, key, cache_control=long_cache)
            result.metadata_patched += 1

        # Pass 2: compressed assets
        for path in compressed_assets:
            key = prefix + strip_gzip_suffix(relative_key(path, build_dir))
            await self._retry(
                f"Upload compressed {key}",
                self.storage.upload,
                path,
                key,
                content_type=self.content_types.for_path(path),
                content_encoding=CONTENT_ENCODING_GZIP,
                cache_control=long_cache
            )
            result.compressed_assets += 1
        if compressed_assets:
            self.logger.info(f"Uploaded {result.compressed_assets} compressed asset(s)")

        # Pass 3: HTML
        for path in html:
            key = prefix + relative_key(path, build_dir)
            await self._retry(
                f"Upload {key}",
                self.storage.upload,
                path,
                key,
                content_type=HTML_CONTENT_TYPE,
                cache_control=short_cache
            )
            result.html_files += 1
        self.logger.info(f"Uploaded {result.html_files} HTML file(s)")

        # Pass 4: compressed HTML
        for path in compressed_html:
            key = prefix + strip_gzip_suffix(relative_key(path, build_dir))
            await self._retry(
                f"Upload compressed {key}",
                self.storage.upload,
                path,
                key,
                content_type=HTML_CONTENT_TYPE,
                content_encoding=CONTENT_ENCODING_GZIP,
                cache_control=short_cache
            )
            result.compressed_html += 1

        for path in intermediates:
            if path.exists() and safe_remove(path):
                result.intermediates_removed += 1

        if verify:
            await self.verify(prefix)
            result.verified = True
        result.message = f"Uploaded {result.total_uploaded} object(s)"
        result.complete(OperationStatus.SUCCESS)
        return result

    async def verify(self, prefix: str) -> None:
        """Require ``<prefix>index.html`` or at least one object under ``prefix``"""
        index_key = prefix + INDEX_DOCUMENT
        if await self._retry(f"Check {index_key}", self.storage.exists, index_key):
            return

        self.logger.warning(f"{INDEX_DOCUMENT} not found under '{prefix}'")
        objects = await self._retry(f"List {prefix or 'bucket root'}", self.storage.list, prefix, limit=1)
        if not objects:
            raise UploadVerificationError(self.storage.location, prefix)

    def _transcript(self) -> "_TranscriptLog":
        return _TranscriptLog(self.sync_log)


class _TranscriptLog:
    """Attaches a file handler to the sync transcript logger for one sync"""

    def __init__(self, path: Optional[Path]):
        self.path = path
        self.logger = logging.getLogger(TRANSCRIPT_LOGGER)
        self.handler = None

    def __enter__(self) -> logging.Logger:
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.handler = logging.FileHandler(self.path, mode='a', encoding='utf-8')
            self.handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
            self.logger.addHandler(self.handler)
            self.logger.setLevel(logging.INFO)
            self.logger.propagate = False
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.handler is not None:
            self.logger.removeHandler(self.handler)
            self.handler.close()
            self.handler = None
        return False
