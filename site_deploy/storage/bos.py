"""Baidu Object Storage (BOS) backend implementation"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import StorageBackend
from ..api.exceptions import StorageError
from ..constants import BOS_PUBLIC_READ_ACL

DEFAULT_BOS_ENDPOINT = "https://bj.bcebos.com"


def _meta_value(meta: Any, name: str) -> Any:
    """Read a header from a BOS response metadata object"""
    value = getattr(meta, name, None)
    if value is None and hasattr(meta, 'get'):
        value = meta.get(name) or meta.get(name.replace('_', '-'))
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    return value


class BOSStorage(StorageBackend):
    """Baidu Object Storage implementation"""

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize BOS storage

        Args:
            config: BOS configuration including:
                - access_key: Access key
                - secret_key: Secret key
                - bucket: Bucket name
                - endpoint: BOS endpoint
        """
        super().__init__(config)
        self.client = None
        self.endpoint = self.config.get('endpoint') or DEFAULT_BOS_ENDPOINT

    async def _do_initialize(self) -> None:
        """Initialize BOS connection"""
        try:
            from baidubce.auth.bce_credentials import BceCredentials
            from baidubce.bce_client_configuration import BceClientConfiguration
            from baidubce.services.bos.bos_client import BosClient
        except ImportError:
            raise StorageError(
                "BOS storage backend requires 'bce-python-sdk' package. "
                "Install with: pip install bce-python-sdk"
            )

        access_key = self.config.get('access_key')
        secret_key = self.config.get('secret_key')
        if not access_key or not secret_key:
            raise StorageError("BOS storage requires BOS_AK and BOS_SK credentials")

        bos_config = BceClientConfiguration(
            credentials=BceCredentials(access_key, secret_key),
            endpoint=self.endpoint
        )
        self.client = BosClient(bos_config)

    @property
    def location(self) -> str:
        return f"bos://{self.bucket}"

    async def _run(self, func, *args, **kwargs):
        # BOS SDK is synchronous, run in executor
        await self.initialize()
        return await asyncio.get_running_loop().run_in_executor(
            None, lambda: func(*args, **kwargs)
        )

    def _user_headers(self,
                      content_encoding: Optional[str],
                      cache_control: Optional[str]) -> Dict[str, str]:
        from baidubce.http import http_headers

        headers = {}
        if content_encoding:
            headers[http_headers.CONTENT_ENCODING] = content_encoding
        if cache_control:
            headers[http_headers.CACHE_CONTROL] = cache_control
        return headers

    async def bucket_exists(self) -> bool:
        return await self._run(lambda: self.client.does_bucket_exist(self.bucket))

    async def create_bucket(self) -> None:
        await self._run(lambda: self.client.create_bucket(self.bucket))
        self.logger.info(f"Created BOS bucket {self.bucket}")

    async def configure_website(self,
                                index_document: str,
                                error_document: str,
                                public_read: bool = False) -> None:
        """Enable BOS static website hosting"""
        await self._run(lambda: self.client.put_bucket_static_website(
            self.bucket, index=index_document, not_found=error_document
        ))
        if public_read:
            await self._run(lambda: self.client.set_bucket_canned_acl(self.bucket, BOS_PUBLIC_READ_ACL))
        self.logger.info(f"Configured static website for BOS bucket {self.bucket}")

    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     content_type: Optional[str] = None,
                     content_encoding: Optional[str] = None,
                     cache_control: Optional[str] = None,
                     metadata: Optional[Dict[str, str]] = None) -> None:
        """Upload file to BOS"""

        def _upload():
            self.client.put_object_from_file(
                self.bucket,
                remote_path,
                str(local_path),
                content_type=content_type,
                user_metadata=metadata or None,
                user_headers=self._user_headers(content_encoding, cache_control) or None
            )

        await self._run(_upload)

    async def exists(self, remote_path: str) -> bool:
        return await self.get_metadata(remote_path) is not None

    async def delete(self, remote_path: str) -> None:
        await self._run(lambda: self.client.delete_object(self.bucket, remote_path))

    async def list(self, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        """List object keys in BOS with prefix"""

        def _list():
            keys = []
            marker = None

            while True:
                response = self.client.list_objects(
                    self.bucket,
                    prefix=prefix,
                    marker=marker,
                    max_keys=min(limit, 1000) if limit else 1000
                )

                for obj in response.contents:
                    keys.append(obj.key)
                    if limit is not None and len(keys) >= limit:
                        return keys

                if response.is_truncated:
                    marker = response.next_marker
                else:
                    break

            return keys

        return await self._run(_list)

    async def list_prefixes(self, prefix: str = "") -> List[str]:

        def _list_prefixes():
            prefixes = []
            marker = None

            while True:
                response = self.client.list_objects(
                    self.bucket,
                    prefix=prefix,
                    delimiter='/',
                    marker=marker,
                    max_keys=1000
                )

                for common in getattr(response, 'common_prefixes', None) or []:
                    prefixes.append(common.prefix)

                if response.is_truncated:
                    marker = response.next_marker
                else:
                    break

            return prefixes

        return await self._run(_list_prefixes)

    async def get_metadata(self, remote_path: str) -> Optional[Dict[str, Any]]:
        """Get object metadata from BOS"""
        from baidubce.exception import BceHttpClientError

        def _get_metadata():
            try:
                response = self.client.get_object_meta_data(self.bucket, remote_path)
            except BceHttpClientError as e:
                if getattr(e.last_error, 'status_code', None) == 404:
                    return None
                raise

            meta = response.metadata
            user_meta = {}
            for name in dir(meta):
                if name.startswith('bce_meta_'):
                    user_meta[name[len('bce_meta_'):]] = _meta_value(meta, name)

            return {
                'size': int(_meta_value(meta, 'content_length') or 0),
                'etag': (_meta_value(meta, 'etag') or '').strip('"'),
                'content_type': _meta_value(meta, 'content_type'),
                'content_encoding': _meta_value(meta, 'content_encoding'),
                'cache_control': _meta_value(meta, 'cache_control'),
                'metadata': user_meta,
            }

        return await self._run(_get_metadata)

    async def set_metadata(self,
                           remote_path: str,
                           cache_control: Optional[str] = None,
                           content_type: Optional[str] = None) -> None:
        """Rewrite object headers with a same-key copy"""
        current = await self.get_metadata(remote_path)
        if current is None:
            raise StorageError(f"Object not found: {remote_path}")

        def _copy():
            self.client.copy_object(
                self.bucket,
                remote_path,
                self.bucket,
                remote_path,
                # passing user metadata switches BOS to the replace directive
                user_metadata=current['metadata'],
                content_type=content_type or current['content_type'],
                user_headers=self._user_headers(
                    current['content_encoding'],
                    cache_control or current['cache_control']
                ) or None
            )

        await self._run(_copy)

    async def _do_close(self) -> None:
        """Close BOS connection"""
        # BOS client doesn't require explicit cleanup
        self.client = None
