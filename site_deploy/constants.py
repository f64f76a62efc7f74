"""Global constants for site-deploy"""

from enum import Enum
import re

APP_NAME = "site-deploy"
LOG_FORMAT = "%(message)s"

# Project files
PROJECT_CONFIG_FILE = ".site-deploy.yaml"
ENV_FILE = ".env"
ENV_FILE_TEMPLATE = ".env.{environment}"

# Default configuration values
DEFAULT_ENVIRONMENT = "production"
DEFAULT_REGION = "us-central1"
DEFAULT_BUCKET_LOCATION = "US"
DEFAULT_BUILD_DIR = "dist"
DEFAULT_RELEASES_PREFIX = "releases/"
DEFAULT_PATH_MATCHER = "path-matcher-1"
DEFAULT_CACHE_MAX_AGE = 31536000  # 1 year
DEFAULT_HTML_CACHE_MAX_AGE = 3600  # 1 hour
DEFAULT_GZIP_EXTENSIONS = "js,css,html,json,svg,txt,xml"
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 5  # seconds
DEFAULT_SYNC_LOG_NAME = "site-deploy-sync.log"
DEFAULT_STORAGE_DIR = ".site-deploy-storage"

# Version keywords
VERSION_AUTO = "auto"
VERSION_TIMESTAMP = "timestamp"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
LOCAL_REVISION = "local"

# Release path aliases meaning "bucket root"
ROOT_PATH_ALIASES = ("", ".", "/", "root")
VERSION_PLACEHOLDER = "{version}"

# Compression
GZIP_SUFFIX = ".gz"
GZIP_LEVEL = 9
LOW_DISK_SPACE_THRESHOLD = 100 * 1024 * 1024  # 100MB

# Upload
HTML_EXTENSIONS = ("html",)
HTML_CONTENT_TYPE = "text/html"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
CONTENT_ENCODING_GZIP = "gzip"
CACHE_CONTROL_TEMPLATE = "public, max-age={max_age}"
INDEX_DOCUMENT = "index.html"
WRITE_CHECK_KEY = ".deployment-test"
CONFLICT_LISTING_LIMIT = 10

# Extension -> media type lookup for pre-compressed assets
DEFAULT_CONTENT_TYPES = {
    "js": "application/javascript",
    "css": "text/css",
    "json": "application/json",
    "svg": "image/svg+xml",
    "txt": "text/plain",
    "xml": "application/xml",
    "html": HTML_CONTENT_TYPE,
}

# Filesystem backend layout
METADATA_DIR = ".site-deploy-meta"
METADATA_SUFFIX = ".json"
WEBSITE_CONFIG_NAME = "website.conf"

# Static website hosting
ERROR_DOCUMENT = INDEX_DOCUMENT
BOS_PUBLIC_READ_ACL = "public-read"


class StorageType(Enum):
    FILESYSTEM = "filesystem"
    BOS = "bos"
    S3 = "s3"


SUPPORTED_STORAGE_TYPES = [t.value for t in StorageType]
DEFAULT_STORAGE_TYPE = StorageType.FILESYSTEM.value


# Error codes
class ErrorCode:
    CONFIGURATION_MISSING = "SD001"
    VALIDATION_FAILED = "SD002"
    BUILD_DIR_NOT_FOUND = "SD003"
    RELEASE_ALREADY_EXISTS = "SD004"
    COMPRESSION_FAILED = "SD005"
    NETWORK_OPERATION_FAILED = "SD006"
    UPLOAD_VERIFICATION_FAILED = "SD007"
    RELEASE_NOT_FOUND = "SD008"
    STORAGE_ERROR = "SD009"
    USER_CANCELLED = "SD010"


# Environment file keys
ENV_PROJECT_ID = "DEPLOY_PROJECT_ID"
ENV_BUCKET_NAME = "DEPLOY_BUCKET_NAME"
ENV_REGION = "DEPLOY_REGION"
ENV_BUCKET_LOCATION = "DEPLOY_BUCKET_LOCATION"
ENV_BUILD_DIR = "DEPLOY_BUILD_DIR"
ENV_VERSION = "DEPLOY_VERSION"
ENV_RELEASE_PATH = "DEPLOY_RELEASE_PATH"
ENV_RELEASES_PREFIX = "DEPLOY_RELEASES_PREFIX"
ENV_BACKEND_BUCKET_NAME = "DEPLOY_BACKEND_BUCKET_NAME"
ENV_CACHE_MAX_AGE = "DEPLOY_CACHE_MAX_AGE"
ENV_HTML_CACHE_MAX_AGE = "DEPLOY_HTML_CACHE_MAX_AGE"
ENV_GZIP_EXTENSIONS = "DEPLOY_GZIP_EXTENSIONS"
ENV_URL_MAP_NAME = "DEPLOY_URL_MAP_NAME"
ENV_PATH_MATCHER_NAME = "DEPLOY_PATH_MATCHER_NAME"
ENV_STORAGE_TYPE = "DEPLOY_STORAGE_TYPE"
ENV_STORAGE_PATH = "DEPLOY_STORAGE_PATH"
ENV_STORAGE_ENDPOINT = "DEPLOY_STORAGE_ENDPOINT"
ENV_DELETE_EXTRANEOUS = "DEPLOY_DELETE_EXTRANEOUS"
ENV_WEBSITE_HOSTING = "DEPLOY_WEBSITE_HOSTING"
ENV_PUBLIC_READ = "DEPLOY_PUBLIC_READ"
ENV_SYNC_LOG = "DEPLOY_SYNC_LOG"
ENV_BOS_ACCESS_KEY = "BOS_AK"
ENV_BOS_SECRET_KEY = "BOS_SK"
ENV_S3_ACCESS_KEY = "AWS_ACCESS_KEY_ID"
ENV_S3_SECRET_KEY = "AWS_SECRET_ACCESS_KEY"

# Validation patterns
VERSION_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]*$")
RELEASE_NAME_PATTERN = re.compile(r"^v?\d[\w.+-]*$")

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ARROW = "→"
EMOJI_ROCKET = "🚀"

# Console URLs
CONSOLE_LOAD_BALANCERS_URL = (
    "https://console.cloud.google.com/net-services/loadbalancing/list/loadBalancers?project={project}"
)

# Message templates
MSG_DEPLOY_SUCCESS = f"{EMOJI_SUCCESS} Deployed release {{version}} to {{location}}"
MSG_ROLLBACK_READY = f"{EMOJI_SUCCESS} Release {{version}} verified for rollback"
MSG_RETRY = f"{EMOJI_WARNING} {{step}} failed (attempt {{attempt}}/{{max_attempts}}). Retrying in {{delay}}s..."

# Interactive prompts
PROMPT_CONFIRM_DEPLOY = "Type 'yes' to proceed with deployment"
PROMPT_CONFIRM_UPLOAD = "Type 'DEPLOY' to confirm upload"
PROMPT_CONFIRM_PRODUCTION_ROLLBACK = "Rollback PRODUCTION? Type 'yes' to confirm"
