"""Discovery of uploaded releases"""

import logging
from typing import List, Optional

from ..constants import RELEASE_NAME_PATTERN
from ..models.config import RetryPolicy, normalize_prefix
from ..models.result import ReleaseInfo
from ..storage.base import StorageBackend
from ..utils.async_utils import retry_async


class ReleaseLister:
    """Lists release folders directly below the releases prefix"""

    def __init__(self,
                 storage: StorageBackend,
                 releases_prefix: str,
                 retry_policy: Optional[RetryPolicy] = None):
        self.storage = storage
        self.releases_prefix = normalize_prefix(releases_prefix)
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logging.getLogger(self.__class__.__name__)

    def release_for(self, version: str) -> ReleaseInfo:
        return ReleaseInfo(version=version, prefix=f"{self.releases_prefix}{version.strip('/')}/")

    async def list_releases(self) -> List[ReleaseInfo]:
        """
        List releases in the order storage returns them

        Only child folders whose name looks like a version (``1.2.0``,
        ``v1.2.0``, ``20240101-120000-abc1234``) are reported.

        Returns:
            Releases found under the releases prefix
        """
        prefixes = await retry_async(
            self.storage.list_prefixes,
            self.releases_prefix,
            policy=self.retry_policy,
            step=f"List releases under {self.releases_prefix}"
        )

        releases = []
        for prefix in prefixes:
            name = prefix[len(self.releases_prefix):].strip('/')
            if RELEASE_NAME_PATTERN.match(name):
                releases.append(ReleaseInfo(version=name, prefix=prefix))
            else:
                self.logger.debug(f"Ignoring non-release folder {prefix}")

        return releases
