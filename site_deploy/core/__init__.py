"""Core deploy components"""

from .compressor import Compressor
from .conflict_guard import ConflictGuard
from .content_types import ContentTypeTable, logical_extension, strip_gzip_suffix
from .release_lister import ReleaseLister
from .release_namer import ReleaseNamer, validate_version
from .rollback_advisor import RollbackAdvisor, invalidation_command
from .uploader import Uploader, cache_control

__all__ = [
    'Compressor',
    'ConflictGuard',
    'ContentTypeTable',
    'ReleaseLister',
    'ReleaseNamer',
    'RollbackAdvisor',
    'Uploader',
    'cache_control',
    'invalidation_command',
    'logical_extension',
    'strip_gzip_suffix',
    'validate_version',
]
