"""Exception definitions for site-deploy API"""

from typing import List, Optional

from ..constants import ErrorCode


class SiteDeployError(Exception):
    """Base exception for site-deploy"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigurationMissingError(SiteDeployError):
    """Required configuration value is absent"""

    def __init__(self, message: str, key: Optional[str] = None, remediation: Optional[List[str]] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_MISSING)
        self.key = key
        self.remediation = remediation or []


class ValidationError(SiteDeployError):
    """Validation error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VALIDATION_FAILED)


class BuildDirectoryNotFoundError(SiteDeployError):
    """Build directory does not exist"""

    def __init__(self, build_dir: str):
        message = f"Build directory not found: {build_dir}"
        super().__init__(message, ErrorCode.BUILD_DIR_NOT_FOUND)
        self.build_dir = build_dir
        self.remediation = [
            "Build your application first (npm run build, yarn build, pnpm build)",
            "Or specify the correct build directory with --build-dir",
        ]


class ReleaseAlreadyExistsError(SiteDeployError):
    """Target release prefix already holds objects"""

    def __init__(self, bucket: str, prefix: str, existing: List[str]):
        message = f"Release path '{prefix}' already exists in bucket {bucket}"
        super().__init__(message, ErrorCode.RELEASE_ALREADY_EXISTS)
        self.bucket = bucket
        self.prefix = prefix
        self.existing = existing
        self.remediation = [
            "Change the version: --version <new-version>",
            "Change the release path: --release-path <other/path/>",
            f"Delete the old release first (dangerous!): remove every object under {bucket}/{prefix}",
        ]


class CompressionError(SiteDeployError):
    """Compressing a single file failed"""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Failed to compress {file_path}: {reason}", ErrorCode.COMPRESSION_FAILED)
        self.file_path = file_path


class NetworkOperationError(SiteDeployError):
    """Remote operation failed after all retry attempts"""

    def __init__(self, step: str, attempts: int, cause: Optional[BaseException] = None):
        message = f"{step} failed after {attempts} attempt(s)"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, ErrorCode.NETWORK_OPERATION_FAILED)
        self.step = step
        self.attempts = attempts
        self.cause = cause


class UploadVerificationError(SiteDeployError):
    """No objects could be found under the release prefix after upload"""

    def __init__(self, bucket: str, prefix: str):
        location = f"{bucket}/{prefix}"
        super().__init__(
            f"Upload verification failed - no files found in {location}",
            ErrorCode.UPLOAD_VERIFICATION_FAILED
        )
        self.bucket = bucket
        self.prefix = prefix


class ReleaseNotFoundError(SiteDeployError):
    """Release version not found error"""

    def __init__(self, release_version: str, location: Optional[str] = None):
        message = f"Release not found: {release_version}"
        if location:
            message = f"{message} ({location})"
        super().__init__(message, ErrorCode.RELEASE_NOT_FOUND)
        self.release_version = release_version


class StorageError(SiteDeployError):
    """Storage operation error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.STORAGE_ERROR)


class UserCancelledError(SiteDeployError):
    """User cancelled the operation"""

    def __init__(self, message: str = "Operation cancelled by user"):
        super().__init__(message, ErrorCode.USER_CANCELLED)
