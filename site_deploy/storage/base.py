"""Storage backend abstract base class"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..models.result import SyncReport
from ..utils.file_utils import calculate_file_checksum, relative_key


class StorageBackend(ABC):
    """Abstract base class for all storage backends

    Keys are plain strings using forward slashes. Backends raise on
    failure; callers wrap calls in the retry policy.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize storage backend

        Args:
            config: Backend-specific configuration
        """
        self.config = config or {}
        self.bucket = self.config.get('bucket')
        self._initialized = False
        self.logger = logging.getLogger(self.__class__.__name__)

    async def initialize(self) -> None:
        """Initialize storage backend (e.g., establish connections)"""
        if not self._initialized:
            await self._do_initialize()
            self._initialized = True

    @abstractmethod
    async def _do_initialize(self) -> None:
        """Actual initialization logic to be implemented by subclasses"""
        pass

    @property
    def location(self) -> str:
        """Human readable root location, e.g. ``s3://bucket``"""
        return str(self.bucket)

    @abstractmethod
    async def bucket_exists(self) -> bool:
        """Check whether the configured bucket exists"""
        pass

    @abstractmethod
    async def create_bucket(self) -> None:
        """Create the configured bucket"""
        pass

    @abstractmethod
    async def configure_website(self,
                                index_document: str,
                                error_document: str,
                                public_read: bool = False) -> None:
        """
        Serve the bucket as a static website

        Args:
            index_document: Object served for directory requests
            error_document: Object served for missing keys
            public_read: Also allow anonymous reads of every object
        """
        pass

    @abstractmethod
    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     content_type: Optional[str] = None,
                     content_encoding: Optional[str] = None,
                     cache_control: Optional[str] = None,
                     metadata: Optional[Dict[str, str]] = None) -> None:
        """
        Upload file to storage

        Args:
            local_path: Local file path
            remote_path: Remote object key
            content_type: Content-Type header
            content_encoding: Content-Encoding header
            cache_control: Cache-Control header
            metadata: User metadata stored with the object
        """
        pass

    @abstractmethod
    async def exists(self, remote_path: str) -> bool:
        """
        Check if object exists in storage

        Args:
            remote_path: Remote object key

        Returns:
            True if exists
        """
        pass

    @abstractmethod
    async def delete(self, remote_path: str) -> None:
        """
        Delete object from storage

        Args:
            remote_path: Remote object key
        """
        pass

    @abstractmethod
    async def list(self, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        """
        List object keys in storage

        Args:
            prefix: Key prefix to filter results
            limit: Maximum number of keys to return

        Returns:
            List of keys in storage order
        """
        pass

    @abstractmethod
    async def list_prefixes(self, prefix: str = "") -> List[str]:
        """
        List immediate child prefixes below ``prefix``

        Args:
            prefix: Slash-terminated parent prefix (empty for root)

        Returns:
            Child prefixes, each slash-terminated and including ``prefix``
        """
        pass

    @abstractmethod
    async def get_metadata(self, remote_path: str) -> Optional[Dict[str, Any]]:
        """
        Get object metadata

        Args:
            remote_path: Remote object key

        Returns:
            Dict with size, content_type, content_encoding, cache_control,
            etag and metadata keys, or None if not found
        """
        pass

    @abstractmethod
    async def set_metadata(self,
                           remote_path: str,
                           cache_control: Optional[str] = None,
                           content_type: Optional[str] = None) -> None:
        """
        Patch headers of an existing object in place

        Args:
            remote_path: Remote object key
            cache_control: New Cache-Control header
            content_type: New Content-Type header
        """
        pass

    async def check_write_access(self, local_file: Path, key: str) -> None:
        """Verify the bucket is writable by uploading and removing a test object"""
        await self.upload(local_file, key, content_type="text/plain")
        await self.delete(key)

    async def sync_directory(self,
                             local_dir: Path,
                             remote_prefix: str,
                             files: Iterable[Path],
                             content_type_for: Callable[[Path], str],
                             delete_extraneous: bool = False,
                             keep_keys: Iterable[str] = (),
                             protected_prefixes: Iterable[str] = (),
                             transcript: Optional[logging.Logger] = None) -> SyncReport:
        """
        Mirror ``files`` under ``remote_prefix``

        Files whose stored checksum matches are left alone. With
        ``delete_extraneous`` every remote key under the prefix that is
        not part of ``files`` or ``keep_keys`` is removed.

        Args:
            local_dir: Directory the files are relative to
            remote_prefix: Target key prefix (empty or slash-terminated)
            files: Local files to synchronise
            content_type_for: Content type lookup for a local file
            delete_extraneous: Remove remote keys absent locally
            keep_keys: Keys to treat as present locally
            protected_prefixes: Key prefixes that are never deleted
            transcript: Logger receiving one line per action

        Returns:
            Sync report
        """
        report = SyncReport()
        log = transcript or self.logger
        local_keys = set(keep_keys)
        protected = tuple(p for p in protected_prefixes if p)

        for local_file in files:
            key = remote_prefix + relative_key(local_file, local_dir)
            local_keys.add(key)
            checksum = calculate_file_checksum(local_file)

            existing = await self.get_metadata(key)
            if existing and existing.get('metadata', {}).get('md5') == checksum:
                report.unchanged.append(key)
                log.info(f"Skipping unchanged {key}")
                continue

            await self.upload(
                local_file,
                key,
                content_type=content_type_for(local_file),
                metadata={'md5': checksum}
            )
            report.uploaded.append(key)
            report.bytes_transferred += local_file.stat().st_size
            log.info(f"Copying {local_file} [Content-Type={content_type_for(local_file)}] -> {key}")

        if delete_extraneous:
            for key in await self.list(remote_prefix):
                if key not in local_keys and not key.startswith(protected):
                    await self.delete(key)
                    report.deleted.append(key)
                    log.info(f"Removing {key}")

        return report

    async def close(self) -> None:
        """Close storage backend connections"""
        if self._initialized:
            await self._do_close()
            self._initialized = False

    async def _do_close(self) -> None:
        """Actual cleanup logic to be implemented by subclasses"""
        pass

    async def __aenter__(self):
        """Async context manager entry"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
