"""Release version naming"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..api.exceptions import ConfigurationMissingError, ValidationError
from ..constants import (
    LOCAL_REVISION,
    TIMESTAMP_FORMAT,
    VERSION_AUTO,
    VERSION_PATTERN,
    VERSION_TIMESTAMP,
)
from ..utils.git_utils import get_latest_tag, get_short_revision

logger = logging.getLogger(__name__)


def validate_version(version: str) -> str:
    """Check that ``version`` is usable as a single path segment"""
    if not VERSION_PATTERN.match(version):
        raise ValidationError(
            f"Invalid version '{version}'. Use letters, digits, '.', '_', '+' or '-' "
            f"and start with a letter or digit"
        )
    return version


class ReleaseNamer:
    """Turn a version request into a concrete release version"""

    def __init__(self,
                 project_root: Optional[Path] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            project_root: Git working tree used for tags and revisions
            clock: Returns the current UTC time
        """
        self.project_root = Path(project_root or Path.cwd())
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def short_revision(self) -> str:
        revision = get_short_revision(self.project_root)
        if not revision:
            logger.debug("Git revision unavailable, using '%s'", LOCAL_REVISION)
            return LOCAL_REVISION
        return revision

    def resolve(self, version: Optional[str]) -> str:
        """
        Resolve a version request

        Args:
            version: A literal version, ``auto`` or ``timestamp``

        Returns:
            Release version

        Raises:
            ConfigurationMissingError: No version given, or ``auto`` without a tag
            ValidationError: Literal version is malformed
        """
        if version is None or not str(version).strip():
            raise ConfigurationMissingError(
                "Version is required",
                key="version",
                remediation=[
                    "Pass it on the command line: --version v1.0.0",
                    "Set DEPLOY_VERSION=v1.0.0 in your env file",
                    "Use DEPLOY_VERSION=auto (git tag + revision) "
                    "or DEPLOY_VERSION=timestamp",
                ]
            )

        version = str(version).strip()

        if version == VERSION_AUTO:
            return self._from_git_tag()
        if version == VERSION_TIMESTAMP:
            return self._from_timestamp()
        return validate_version(version)

    def _from_git_tag(self) -> str:
        tag = get_latest_tag(self.project_root)
        if not tag:
            raise ConfigurationMissingError(
                "No git tags found for automatic versioning",
                key="version",
                remediation=[
                    "Create a tag first: git tag v1.0.0",
                    "Or use an explicit version: --version v1.0.0",
                ]
            )
        version = f"{tag}-{self.short_revision()}"
        logger.info(f"Auto-generated version: {version}")
        return validate_version(version)

    def _from_timestamp(self) -> str:
        # Two runs within the same second and revision produce the same name
        stamp = self.clock().astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
        version = f"{stamp}-{self.short_revision()}"
        logger.info(f"Timestamp version: {version}")
        return version
