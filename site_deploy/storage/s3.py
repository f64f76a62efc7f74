"""AWS S3 storage backend implementation"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import StorageBackend
from ..api.exceptions import StorageError

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound", "NoSuchBucket")


class S3Storage(StorageBackend):
    """AWS S3 (and S3-compatible) storage implementation"""

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize S3 storage

        Args:
            config: S3 configuration including:
                - access_key: AWS access key ID (optional, boto3 chain otherwise)
                - secret_key: AWS secret access key
                - bucket: S3 bucket name
                - region: AWS region
                - endpoint: Custom endpoint (for S3-compatible services)
        """
        super().__init__(config)
        self.client = None
        self.region = self.config.get('region')

    def _get_client_config(self) -> Dict[str, str]:
        """Get boto3 client configuration"""
        config = {}
        if self.region:
            config["region_name"] = self.region
        if self.config.get('endpoint'):
            config["endpoint_url"] = self.config['endpoint']
        if self.config.get('access_key'):
            config["aws_access_key_id"] = self.config['access_key']
        if self.config.get('secret_key'):
            config["aws_secret_access_key"] = self.config['secret_key']
        return config

    async def _do_initialize(self) -> None:
        """Initialize S3 client"""
        try:
            import boto3
        except ImportError:
            raise StorageError(
                "S3 storage backend requires 'boto3' package. "
                "Install with: pip install boto3"
            )
        self.client = boto3.client("s3", **self._get_client_config())

    @property
    def location(self) -> str:
        return f"s3://{self.bucket}"

    async def _run(self, func):
        # boto3 is synchronous, run in executor
        await self.initialize()
        return await asyncio.get_running_loop().run_in_executor(None, func)

    @staticmethod
    def _is_not_found(error: Exception) -> bool:
        response = getattr(error, 'response', None) or {}
        return str(response.get('Error', {}).get('Code')) in NOT_FOUND_CODES

    async def bucket_exists(self) -> bool:

        def _head():
            try:
                self.client.head_bucket(Bucket=self.bucket)
                return True
            except Exception as e:
                if self._is_not_found(e):
                    return False
                raise

        return await self._run(_head)

    async def create_bucket(self) -> None:

        def _create():
            kwargs = {"Bucket": self.bucket}
            if self.region and self.region != "us-east-1":
                kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
            self.client.create_bucket(**kwargs)

        await self._run(_create)
        self.logger.info(f"Created S3 bucket {self.bucket}")

    async def configure_website(self,
                                index_document: str,
                                error_document: str,
                                public_read: bool = False) -> None:
        """Enable website hosting, optionally with a public read policy"""

        def _configure():
            self.client.put_bucket_website(
                Bucket=self.bucket,
                WebsiteConfiguration={
                    'IndexDocument': {'Suffix': index_document},
                    'ErrorDocument': {'Key': error_document},
                }
            )
            if not public_read:
                return

            # Block Public Access overrides bucket policies, lift it first
            self.client.put_public_access_block(
                Bucket=self.bucket,
                PublicAccessBlockConfiguration={
                    'BlockPublicAcls': False,
                    'IgnorePublicAcls': False,
                    'BlockPublicPolicy': False,
                    'RestrictPublicBuckets': False,
                }
            )
            self.client.put_bucket_policy(
                Bucket=self.bucket,
                Policy=json.dumps({
                    'Version': '2012-10-17',
                    'Statement': [{
                        'Sid': 'PublicReadGetObject',
                        'Effect': 'Allow',
                        'Principal': '*',
                        'Action': 's3:GetObject',
                        'Resource': f'arn:aws:s3:::{self.bucket}/*',
                    }],
                })
            )

        await self._run(_configure)
        self.logger.info(f"Configured website hosting for S3 bucket {self.bucket}")

    async def upload(self,
                     local_path: Path,
                     remote_path: str,
                     content_type: Optional[str] = None,
                     content_encoding: Optional[str] = None,
                     cache_control: Optional[str] = None,
                     metadata: Optional[Dict[str, str]] = None) -> None:
        """Upload file to S3"""
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        if content_encoding:
            extra_args["ContentEncoding"] = content_encoding
        if cache_control:
            extra_args["CacheControl"] = cache_control
        if metadata:
            extra_args["Metadata"] = dict(metadata)

        await self._run(lambda: self.client.upload_file(
            str(local_path), self.bucket, remote_path, ExtraArgs=extra_args or None
        ))

    async def exists(self, remote_path: str) -> bool:
        return await self.get_metadata(remote_path) is not None

    async def delete(self, remote_path: str) -> None:
        await self._run(lambda: self.client.delete_object(Bucket=self.bucket, Key=remote_path))

    async def list(self, prefix: str = "", limit: Optional[int] = None) -> List[str]:
        """List object keys in S3 with prefix"""

        def _list():
            keys = []
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
                    if limit is not None and len(keys) >= limit:
                        return keys
            return keys

        return await self._run(_list)

    async def list_prefixes(self, prefix: str = "") -> List[str]:

        def _list_prefixes():
            prefixes = []
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter="/"):
                for common in page.get("CommonPrefixes", []):
                    prefixes.append(common["Prefix"])
            return prefixes

        return await self._run(_list_prefixes)

    async def get_metadata(self, remote_path: str) -> Optional[Dict[str, Any]]:
        """Get object metadata from S3"""

        def _head():
            try:
                response = self.client.head_object(Bucket=self.bucket, Key=remote_path)
            except Exception as e:
                if self._is_not_found(e):
                    return None
                raise

            return {
                'size': response.get('ContentLength', 0),
                'etag': response.get('ETag', '').strip('"'),
                'content_type': response.get('ContentType'),
                'content_encoding': response.get('ContentEncoding'),
                'cache_control': response.get('CacheControl'),
                'metadata': response.get('Metadata', {}),
            }

        return await self._run(_head)

    async def set_metadata(self,
                           remote_path: str,
                           cache_control: Optional[str] = None,
                           content_type: Optional[str] = None) -> None:
        """Rewrite object headers with a same-key copy"""
        current = await self.get_metadata(remote_path)
        if current is None:
            raise StorageError(f"Object not found: {remote_path}")

        extra = {
            "Metadata": current['metadata'],
            "MetadataDirective": "REPLACE",
        }
        if content_type or current['content_type']:
            extra["ContentType"] = content_type or current['content_type']
        if current['content_encoding']:
            extra["ContentEncoding"] = current['content_encoding']
        if cache_control or current['cache_control']:
            extra["CacheControl"] = cache_control or current['cache_control']

        await self._run(lambda: self.client.copy_object(
            Bucket=self.bucket,
            Key=remote_path,
            CopySource={"Bucket": self.bucket, "Key": remote_path},
            **extra
        ))

    async def _do_close(self) -> None:
        """Close S3 client"""
        self.client = None
