"""Storage backend factory"""

from typing import Any, Dict, List, Type

from .base import StorageBackend
from .bos import BOSStorage
from .filesystem import FilesystemStorage
from .s3 import S3Storage
from ..api.exceptions import ValidationError
from ..constants import SUPPORTED_STORAGE_TYPES, StorageType
from ..models.config import DeployConfig


class StorageFactory:
    """Factory for creating storage backend instances"""

    # Registry of storage backends
    _backends: Dict[StorageType, Type[StorageBackend]] = {
        StorageType.FILESYSTEM: FilesystemStorage,
        StorageType.BOS: BOSStorage,
        StorageType.S3: S3Storage,
    }

    @classmethod
    def create_from_config(cls, config: DeployConfig) -> StorageBackend:
        """Create storage backend from a deploy configuration

        Args:
            config: Effective deploy configuration

        Returns:
            Storage backend instance

        Raises:
            ValidationError: If no backend is registered for the type
        """
        return cls.create_from_dict(config.storage_type, config.storage_config())

    @classmethod
    def create_from_dict(cls, storage_type: str, config: Dict[str, Any]) -> StorageBackend:
        """Create storage backend from type and configuration dict

        Args:
            storage_type: Storage type string
            config: Configuration dictionary

        Returns:
            Storage backend instance

        Raises:
            ValidationError: If no backend is registered for the type
        """
        backend_class = None
        if storage_type in SUPPORTED_STORAGE_TYPES:
            backend_class = cls._backends.get(StorageType(storage_type))

        if backend_class is None:
            raise ValidationError(
                f"Unsupported storage type '{storage_type}' "
                f"(expected one of: {', '.join(cls.get_supported_types())})"
            )
        return backend_class(config)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        """Get list of supported storage types"""
        return [st.value for st in cls._backends.keys()]
