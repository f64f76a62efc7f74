"""Refuse to overwrite an existing release"""

import logging
from typing import List, Optional

from ..api.exceptions import ReleaseAlreadyExistsError
from ..constants import CONFLICT_LISTING_LIMIT
from ..models.config import RetryPolicy
from ..storage.base import StorageBackend
from ..utils.async_utils import retry_async


class ConflictGuard:
    """Checks that a release prefix is still empty before uploading"""

    def __init__(self, storage: StorageBackend, retry_policy: Optional[RetryPolicy] = None):
        self.storage = storage
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logging.getLogger(self.__class__.__name__)

    async def check(self, prefix: str) -> List[str]:
        """
        Raise if objects already exist under ``prefix``

        Args:
            prefix: Normalized release prefix, empty for the bucket root

        Returns:
            Empty list when the prefix is free

        Raises:
            ReleaseAlreadyExistsError: Objects exist under the prefix
            NetworkOperationError: Listing failed after retries
        """
        if not prefix:
            self.logger.warning("Deploying to bucket root, skipping release conflict check")
            return []

        existing = await retry_async(
            self.storage.list,
            prefix,
            limit=CONFLICT_LISTING_LIMIT,
            policy=self.retry_policy,
            step=f"List existing objects under {prefix}"
        )
        if existing:
            raise ReleaseAlreadyExistsError(self.storage.location, prefix, existing[:CONFLICT_LISTING_LIMIT])

        self.logger.info(f"Release path {prefix} is available")
        return []
