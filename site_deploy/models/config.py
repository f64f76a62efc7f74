"""Configuration data models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..constants import (
    DEFAULT_BUCKET_LOCATION,
    DEFAULT_BUILD_DIR,
    DEFAULT_CACHE_MAX_AGE,
    DEFAULT_CONTENT_TYPES,
    DEFAULT_ENVIRONMENT,
    DEFAULT_GZIP_EXTENSIONS,
    DEFAULT_HTML_CACHE_MAX_AGE,
    DEFAULT_PATH_MATCHER,
    DEFAULT_REGION,
    DEFAULT_RELEASES_PREFIX,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_STORAGE_TYPE,
    ROOT_PATH_ALIASES,
    VERSION_PLACEHOLDER,
    StorageType,
)


@dataclass
class RetryPolicy:
    """Retry policy for remote operations"""

    max_attempts: int = DEFAULT_RETRY_COUNT
    delay: float = DEFAULT_RETRY_DELAY
    backoff_multiplier: float = 1.0
    max_delay: float = 300  # 5 minutes

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    def get_retry_delay(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (1-based)"""
        delay = self.delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay)


@dataclass
class CacheConfig:
    """Cache lifetimes written as Cache-Control headers"""

    max_age: int = DEFAULT_CACHE_MAX_AGE
    html_max_age: int = DEFAULT_HTML_CACHE_MAX_AGE


def normalize_prefix(path: Optional[str]) -> str:
    """Normalize a storage prefix: empty for root, otherwise slash-terminated"""
    if path is None:
        return ""
    path = path.strip()
    if path in ROOT_PATH_ALIASES:
        return ""
    path = path.strip("/")
    return f"{path}/" if path else ""


def parse_extensions(value: Any) -> List[str]:
    """Parse a comma separated extension list, keeping order and dropping duplicates"""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)

    extensions = []
    for item in items:
        ext = str(item).strip().lstrip(".").lower()
        if ext and ext not in extensions:
            extensions.append(ext)
    return extensions


@dataclass
class DeployConfig:
    """Effective configuration for a deploy or rollback run"""

    project_id: Optional[str] = None
    bucket: Optional[str] = None
    environment: str = DEFAULT_ENVIRONMENT
    region: str = DEFAULT_REGION
    bucket_location: str = DEFAULT_BUCKET_LOCATION
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    version: Optional[str] = None
    release_path: str = ""
    releases_prefix: str = DEFAULT_RELEASES_PREFIX
    backend: Optional[str] = None
    url_map: Optional[str] = None
    path_matcher: str = DEFAULT_PATH_MATCHER
    gzip_extensions: List[str] = field(default_factory=lambda: parse_extensions(DEFAULT_GZIP_EXTENSIONS))
    content_types: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CONTENT_TYPES))
    cache: CacheConfig = field(default_factory=CacheConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    storage_type: str = DEFAULT_STORAGE_TYPE
    storage_options: Dict[str, Any] = field(default_factory=dict)
    delete_extraneous: bool = False
    website_hosting: bool = False
    public_read: bool = False
    sync_log: Optional[Path] = None
    project_root: Optional[Path] = None
    env_file: Optional[Path] = None

    def __post_init__(self):
        StorageType(self.storage_type)
        self.build_dir = Path(self.build_dir)
        self.releases_prefix = normalize_prefix(self.releases_prefix) or normalize_prefix(DEFAULT_RELEASES_PREFIX)
        if isinstance(self.gzip_extensions, str):
            self.gzip_extensions = parse_extensions(self.gzip_extensions)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def release_prefix(self, version: Optional[str] = None) -> str:
        """Resolve the target storage prefix for ``version``"""
        path = self.release_path or ""
        if VERSION_PLACEHOLDER in path:
            if not version:
                raise ValueError("Release path contains {version} but no version is known")
            path = path.replace(VERSION_PLACEHOLDER, version)
        return normalize_prefix(path)

    def storage_config(self) -> Dict[str, Any]:
        """Backend configuration passed to the storage factory"""
        config = {
            "bucket": self.bucket,
            "region": self.region,
            "location": self.bucket_location,
            "project_id": self.project_id,
        }
        config.update({k: v for k, v in self.storage_options.items() if v is not None})
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display"""
        return {
            "project_id": self.project_id,
            "bucket": self.bucket,
            "environment": self.environment,
            "region": self.region,
            "bucket_location": self.bucket_location,
            "build_dir": str(self.build_dir),
            "version": self.version,
            "release_path": self.release_path,
            "releases_prefix": self.releases_prefix,
            "backend": self.backend,
            "url_map": self.url_map,
            "path_matcher": self.path_matcher,
            "gzip_extensions": ",".join(self.gzip_extensions),
            "cache_max_age": self.cache.max_age,
            "html_cache_max_age": self.cache.html_max_age,
            "storage_type": self.storage_type,
            "delete_extraneous": self.delete_extraneous,
            "website_hosting": self.website_hosting,
            "public_read": self.public_read,
        }
