"""Configuration resolution service"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from dotenv import dotenv_values

from ..api.exceptions import ConfigurationMissingError, ValidationError
from ..constants import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_STORAGE_DIR,
    DEFAULT_SYNC_LOG_NAME,
    ENV_BACKEND_BUCKET_NAME,
    ENV_BOS_ACCESS_KEY,
    ENV_BOS_SECRET_KEY,
    ENV_BUCKET_LOCATION,
    ENV_BUCKET_NAME,
    ENV_BUILD_DIR,
    ENV_CACHE_MAX_AGE,
    ENV_DELETE_EXTRANEOUS,
    ENV_FILE,
    ENV_FILE_TEMPLATE,
    ENV_GZIP_EXTENSIONS,
    ENV_HTML_CACHE_MAX_AGE,
    ENV_PATH_MATCHER_NAME,
    ENV_PROJECT_ID,
    ENV_PUBLIC_READ,
    ENV_REGION,
    ENV_RELEASE_PATH,
    ENV_RELEASES_PREFIX,
    ENV_S3_ACCESS_KEY,
    ENV_S3_SECRET_KEY,
    ENV_STORAGE_ENDPOINT,
    ENV_STORAGE_PATH,
    ENV_STORAGE_TYPE,
    ENV_SYNC_LOG,
    ENV_URL_MAP_NAME,
    ENV_VERSION,
    ENV_WEBSITE_HOSTING,
    PROJECT_CONFIG_FILE,
    StorageType,
)
from ..models.config import CacheConfig, DeployConfig, RetryPolicy, parse_extensions
from ..models.result import ReleaseInfo

# Env file key -> configuration field
ENV_KEY_FIELDS = {
    ENV_PROJECT_ID: 'project_id',
    ENV_BUCKET_NAME: 'bucket',
    ENV_REGION: 'region',
    ENV_BUCKET_LOCATION: 'bucket_location',
    ENV_BUILD_DIR: 'build_dir',
    ENV_VERSION: 'version',
    ENV_RELEASE_PATH: 'release_path',
    ENV_RELEASES_PREFIX: 'releases_prefix',
    ENV_BACKEND_BUCKET_NAME: 'backend',
    ENV_CACHE_MAX_AGE: 'cache_max_age',
    ENV_HTML_CACHE_MAX_AGE: 'html_cache_max_age',
    ENV_GZIP_EXTENSIONS: 'gzip_extensions',
    ENV_URL_MAP_NAME: 'url_map',
    ENV_PATH_MATCHER_NAME: 'path_matcher',
    ENV_STORAGE_TYPE: 'storage_type',
    ENV_STORAGE_PATH: 'storage_path',
    ENV_STORAGE_ENDPOINT: 'storage_endpoint',
    ENV_DELETE_EXTRANEOUS: 'delete_extraneous',
    ENV_WEBSITE_HOSTING: 'website_hosting',
    ENV_PUBLIC_READ: 'public_read',
    ENV_SYNC_LOG: 'sync_log',
}

# Credentials are read from the env file first, then the process environment
CREDENTIAL_KEYS = {
    StorageType.BOS.value: (ENV_BOS_ACCESS_KEY, ENV_BOS_SECRET_KEY),
    StorageType.S3.value: (ENV_S3_ACCESS_KEY, ENV_S3_SECRET_KEY),
}

FIELD_PROMPTS = {
    'project_id': ("Project ID", ENV_PROJECT_ID),
    'bucket': ("Bucket name", ENV_BUCKET_NAME),
    'url_map': ("URL map name", ENV_URL_MAP_NAME),
}

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off', '')


class ConfigProvider(ABC):
    """Source of answers when configuration or confirmation is needed"""

    interactive = False

    @abstractmethod
    def ask(self, key: str, prompt: str, default: Optional[str] = None,
            remediation: Optional[List[str]] = None) -> str:
        """Return a value for a missing required setting"""

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Yes/no confirmation"""

    @abstractmethod
    def confirm_typed(self, message: str, expected: str) -> bool:
        """Confirmation that requires typing ``expected``"""

    @abstractmethod
    def choose_release(self, releases: List[ReleaseInfo]) -> Optional[str]:
        """Pick a release version to roll back to"""

    @abstractmethod
    def corrected_build_dir(self, missing: Path) -> Optional[Path]:
        """Offer a replacement for a build directory that does not exist"""


class NonInteractiveProvider(ConfigProvider):
    """Provider for automated runs: never prompts, assumes consent"""

    def ask(self, key, prompt, default=None, remediation=None):
        if default:
            return default
        raise ConfigurationMissingError(
            f"{prompt} is required", key=key, remediation=remediation or []
        )

    def confirm(self, message, default=False):
        return True

    def confirm_typed(self, message, expected):
        return True

    def choose_release(self, releases):
        raise ConfigurationMissingError(
            "No release version specified and prompts are disabled",
            key="version",
            remediation=[
                "Pass the release to roll back to: site-deploy rollback <version>",
                "List available releases: site-deploy releases",
            ]
        )

    def corrected_build_dir(self, missing):
        return None


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid boolean for {key}: {value!r}")


def _to_int(value: Any, key: str) -> int:
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid integer for {key}: {value!r}")
    if number < 0:
        raise ValidationError(f"{key} must not be negative")
    return number


class ConfigService:
    """Builds the effective configuration for a run

    Precedence: explicit overrides (CLI flags) > env file > project YAML
    file > built-in defaults.
    """

    def __init__(self,
                 project_root: Optional[Path] = None,
                 environment: Optional[str] = None,
                 provider: Optional[ConfigProvider] = None):
        """
        Args:
            project_root: Directory holding the env files and project file
            environment: Environment name selecting ``.env.<environment>``
            provider: Answers missing values and confirmations
        """
        self.project_root = Path(project_root or Path.cwd()).resolve()
        self.environment = environment or DEFAULT_ENVIRONMENT
        self.provider = provider or NonInteractiveProvider()
        self.config_path = self.project_root / PROJECT_CONFIG_FILE
        self.env_file: Optional[Path] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def find_env_file(self) -> Optional[Path]:
        """``.env.<environment>`` if present, otherwise ``.env``"""
        candidates = [
            self.project_root / ENV_FILE_TEMPLATE.format(environment=self.environment),
            self.project_root / ENV_FILE,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    def load_env_file(self) -> Dict[str, str]:
        """Parse the env file into a dict of raw values"""
        self.env_file = self.find_env_file()
        if self.env_file is None:
            self.logger.debug("No env file found in %s", self.project_root)
            return {}

        self.logger.info(f"Loading configuration from: {self.env_file}")
        values = dotenv_values(self.env_file)
        return {k: v for k, v in values.items() if v is not None}

    def load_project_file(self) -> Dict[str, Any]:
        """Load the optional YAML project file"""
        if not self.config_path.exists():
            return {}

        with open(self.config_path, 'r') as f:
            content = os.path.expandvars(f.read())

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(data, dict):
            raise ValidationError(f"{self.config_path} must contain a mapping")
        return data

    def _flatten_project_file(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in data.items() if k not in ('storage', 'content_types', 'retry')}
        storage = data.get('storage') or {}
        for name in ('type', 'path', 'endpoint'):
            if storage.get(name) is not None:
                values[f'storage_{name}'] = storage[name]
        return values

    def resolve(self,
                overrides: Optional[Dict[str, Any]] = None,
                required: Iterable[str] = ('project_id', 'bucket')) -> DeployConfig:
        """
        Resolve the effective configuration

        Args:
            overrides: Values from the command line; None entries are ignored
            required: Fields that must end up with a value

        Returns:
            DeployConfig

        Raises:
            ConfigurationMissingError: A required value is missing and the
                provider cannot supply it
            ValidationError: A value is malformed
        """
        project_data = self.load_project_file()
        env_values = self.load_env_file()

        values: Dict[str, Any] = self._flatten_project_file(project_data)
        for env_key, field_name in ENV_KEY_FIELDS.items():
            if env_values.get(env_key, '') != '':
                values[field_name] = env_values[env_key]
        for key, value in (overrides or {}).items():
            if value is not None:
                values[key] = value

        for field_name in required:
            if not values.get(field_name):
                prompt, env_key = FIELD_PROMPTS.get(field_name, (field_name, field_name.upper()))
                values[field_name] = self.provider.ask(
                    field_name,
                    prompt,
                    remediation=[
                        f"Set {env_key} in {self.env_file or self.project_root / ENV_FILE}",
                        f"Or pass --{field_name.replace('_', '-')} on the command line",
                    ]
                )

        return self._build_config(values, project_data, env_values)

    def _build_config(self,
                      values: Dict[str, Any],
                      project_data: Dict[str, Any],
                      env_values: Dict[str, str]) -> DeployConfig:
        storage_type = str(values.get('storage_type') or StorageType.FILESYSTEM.value).lower()
        try:
            StorageType(storage_type)
        except ValueError:
            supported = ", ".join(t.value for t in StorageType)
            raise ValidationError(f"Unsupported storage type '{storage_type}' (supported: {supported})")

        cache = CacheConfig()
        if values.get('cache_max_age') not in (None, ''):
            cache.max_age = _to_int(values['cache_max_age'], 'cache_max_age')
        if values.get('html_cache_max_age') not in (None, ''):
            cache.html_max_age = _to_int(values['html_cache_max_age'], 'html_cache_max_age')

        retry_data = project_data.get('retry') or {}
        try:
            retry = RetryPolicy(
                max_attempts=int(retry_data.get('max_attempts', DEFAULT_RETRY_COUNT)),
                delay=float(retry_data.get('delay', DEFAULT_RETRY_DELAY)),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid retry settings: {e}")

        content_types = project_data.get('content_types') or {}
        if not isinstance(content_types, dict):
            raise ValidationError("content_types must be a mapping of extension to media type")

        build_dir = Path(str(values.get('build_dir') or 'dist')).expanduser()
        if not build_dir.is_absolute():
            build_dir = self.project_root / build_dir

        sync_log = values.get('sync_log')
        sync_log = Path(str(sync_log)).expanduser() if sync_log else Path(tempfile.gettempdir()) / DEFAULT_SYNC_LOG_NAME

        config_kwargs = {
            'project_id': values.get('project_id'),
            'bucket': values.get('bucket'),
            'build_dir': build_dir,
            'version': values.get('version'),
            'release_path': str(values.get('release_path') or ''),
            'backend': values.get('backend'),
            'url_map': values.get('url_map'),
            'cache': cache,
            'retry': retry,
            'storage_type': storage_type,
            'storage_options': self._storage_options(storage_type, values, env_values),
            'delete_extraneous': _to_bool(values.get('delete_extraneous', False), 'delete_extraneous'),
            'website_hosting': _to_bool(values.get('website_hosting', False), 'website_hosting'),
            'public_read': _to_bool(values.get('public_read', False), 'public_read'),
            'sync_log': sync_log,
            'environment': self.environment,
            'project_root': self.project_root,
            'env_file': self.env_file,
        }
        for name in ('region', 'bucket_location', 'releases_prefix', 'path_matcher'):
            if values.get(name):
                config_kwargs[name] = str(values[name])
        if values.get('gzip_extensions') is not None:
            config_kwargs['gzip_extensions'] = parse_extensions(values['gzip_extensions'])

        config = DeployConfig(**config_kwargs)
        config.content_types.update({str(k).lstrip('.').lower(): str(v) for k, v in content_types.items()})
        return config

    def _storage_options(self,
                         storage_type: str,
                         values: Dict[str, Any],
                         env_values: Dict[str, str]) -> Dict[str, Any]:
        options: Dict[str, Any] = {}

        if storage_type == StorageType.FILESYSTEM.value:
            path = Path(str(values.get('storage_path') or DEFAULT_STORAGE_DIR)).expanduser()
            if not path.is_absolute():
                path = self.project_root / path
            options['path'] = str(path)

        if values.get('storage_endpoint'):
            options['endpoint'] = values['storage_endpoint']

        access_env, secret_env = CREDENTIAL_KEYS.get(storage_type, (None, None))
        if access_env:
            options['access_key'] = env_values.get(access_env) or os.environ.get(access_env)
            options['secret_key'] = env_values.get(secret_env) or os.environ.get(secret_env)

        return options
