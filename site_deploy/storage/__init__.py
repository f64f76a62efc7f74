"""Storage backends for site-deploy"""

from .base import StorageBackend
from .bos import BOSStorage
from .factory import StorageFactory
from .filesystem import FilesystemStorage
from .s3 import S3Storage

__all__ = [
    'StorageBackend',
    'BOSStorage',
    'FilesystemStorage',
    'S3Storage',
    'StorageFactory',
]
