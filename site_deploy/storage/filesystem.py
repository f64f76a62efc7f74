"""Filesystem storage backend implementation"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from .base import StorageBackend
from ..api.exceptions import StorageError
from ..constants import DEFAULT_STORAGE_DIR, METADATA_DIR, METADATA_SUFFIX, WEBSITE_CONFIG_NAME

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB


class FilesystemStorage(StorageBackend):
    """Local filesystem storage implementation

    A bucket is a directory below ``path``. Object headers are kept in
    JSON sidecar files under ``<bucket>/.site-deploy-meta/``.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize filesystem storage

        Args:
            config: Configuration including:
                - path: Directory holding the buckets
                - bucket: Bucket name
        """
        super().__init__(config)
        base_path = self.config.get('path') or DEFAULT_STORAGE_DIR
        self.base_path = Path(base_path).expanduser()
        self.bucket_path = self.base_path / str(self.bucket)
        self.meta_path = self.bucket_path / METADATA_DIR

    async def _do_initialize(self) -> None:
        """Initialize filesystem storage (ensure the base directory exists)"""
        if not self.bucket:
            raise StorageError("Filesystem storage requires a bucket name")
        self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    def location(self) -> str:
        return f"file://{self.bucket_path}"

    def _object_path(self, remote_path: str) -> Path:
        parts = [p for p in remote_path.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts) or parts[0] == METADATA_DIR:
            raise StorageError(f"Invalid object key: {remote_path!r}")
        return self.bucket_path.joinpath(*parts)

    def _meta_file(self, remote_path: str) -> Path:
        parts = [p for p in remote_path.split("/") if p]
        parts[-1] = parts[-1] + METADATA_SUFFIX
        return self.meta_path.joinpath(*parts)

    def _require_bucket(self) -> None:
        if not self.bucket_path.is_dir():
            raise StorageError(f"Bucket does not exist: {self.bucket}")

    async def bucket_exists(self) -> bool:
        await self.initialize()
        return self.bucket_path.is_dir()

    async def create_bucket(self) -> None:
        await self.initialize()
        self.bucket_path.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Created bucket directory {self.bucket_path}")

    async def configure_website(self,
                                index_document: str,
                                error_document: str,
                                public_read: bool = False) -> None:
        """Record the website settings next to the object sidecars"""
        await self.initialize()
        self._require_bucket()

        self.meta_path.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.meta_path / WEBSITE_CONFIG_NAME, 'w') as f:
            await f.write(json.dumps({
                'index_document': index_document,
                'error_document': error_document,
                'public_read': public_read,
            }, indent=2, sort_keys=True))

    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     content_type: Optional[str] = None,
                     content_encoding: Optional[str] = None,
                     cache_control: Optional[str] = None,
                     metadata: Optional[Dict[str, str]] = None) -> None:
        """Copy file into the bucket directory and record its headers"""
        await self.initialize()
        self._require_bucket()

        local_path = Path(local_path)
        target = self._object_path(remote_path)
        target.parent.mkdir(parents=True, exist_ok=True)

        size = 0
        async with aiofiles.open(local_path, 'rb') as src:
            async with aiofiles.open(target, 'wb') as dst:
                while True:
                    chunk = await src.read(DEFAULT_CHUNK_SIZE)
                    if not chunk:
                        break
                    await dst.write(chunk)
                    size += len(chunk)

        await self._write_meta(remote_path, {
            'size': size,
            'content_type': content_type,
            'content_encoding': content_encoding,
            'cache_control': cache_control,
            'metadata': dict(metadata or {}),
        })

    async def _write_meta(self, remote_path: str, meta: Dict[str, Any]) -> None:
        meta_file = self._meta_file(remote_path)
        meta_file.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(meta_file, 'w') as f:
            await f.write(json.dumps(meta, indent=2, sort_keys=True))

    async def _read_meta(self, remote_path: str) -> Dict[str, Any]:
        meta_file = self._meta_file(remote_path)
        if not meta_file.exists():
            return {}
        async with aiofiles.open(meta_file, 'r') as f:
            return json.loads(await f.read())

    async def exists(self, remote_path: str) -> bool:
        await self.initialize()
        return self._object_path(remote_path).is_file()

    async def delete(self, remote_path: str) -> None:
        await self.initialize()
        target = self._object_path(remote_path)
        if target.is_file():
            target.unlink()
        meta_file = self._meta_file(remote_path)
        if meta_file.exists():
            meta_file.unlink()

    async def list(self, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        """List object keys under ``prefix`` in lexical order"""
        await self.initialize()
        self._require_bucket()

        def _walk() -> List[str]:
            keys = []
            for root, dirs, files in os.walk(self.bucket_path):
                if Path(root) == self.bucket_path and METADATA_DIR in dirs:
                    dirs.remove(METADATA_DIR)
                for name in files:
                    key = (Path(root) / name).relative_to(self.bucket_path).as_posix()
                    if key.startswith(prefix):
                        keys.append(key)
            return sorted(keys)

        keys = await asyncio.get_running_loop().run_in_executor(None, _walk)
        return keys[:limit] if limit is not None else keys

    async def list_prefixes(self, prefix: str = "") -> List[str]:
        children = []
        for key in await self.list(prefix):
            rest = key[len(prefix):]
            if "/" in rest:
                child = prefix + rest.split("/", 1)[0] + "/"
                if child not in children:
                    children.append(child)
        return children

    async def get_metadata(self, remote_path: str) -> Optional[Dict[str, Any]]:
        await self.initialize()
        target = self._object_path(remote_path)
        if not target.is_file():
            return None

        meta = await self._read_meta(remote_path)
        meta['size'] = target.stat().st_size
        meta.setdefault('metadata', {})
        meta['etag'] = meta['metadata'].get('md5')
        return meta

    async def set_metadata(self,
                           remote_path: str,
                           cache_control: Optional[str] = None,
                           content_type: Optional[str] = None) -> None:
        await self.initialize()
        if not self._object_path(remote_path).is_file():
            raise StorageError(f"Object not found: {remote_path}")

        meta = await self._read_meta(remote_path)
        if cache_control is not None:
            meta['cache_control'] = cache_control
        if content_type is not None:
            meta['content_type'] = content_type
        await self._write_meta(remote_path, meta)

    async def read_bytes(self, remote_path: str) -> bytes:
        """Return the stored object body"""
        await self.initialize()
        async with aiofiles.open(self._object_path(remote_path), 'rb') as f:
            return await f.read()
