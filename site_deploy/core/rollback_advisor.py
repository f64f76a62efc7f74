"""Load balancer repoint instructions for rollbacks"""

import logging
from typing import Optional, Tuple

from .release_lister import ReleaseLister
from ..api.exceptions import ReleaseNotFoundError
from ..constants import CONSOLE_LOAD_BALANCERS_URL, INDEX_DOCUMENT
from ..models.config import DeployConfig
from ..models.result import ReleaseInfo, RepointInstructions
from ..utils.async_utils import retry_async

URL_MAP_EXPORT_FILE = "url-map.yaml"
DEFAULT_INVALIDATION_PATH = "/*"


def invalidation_command(url_map: str, path_pattern: str = DEFAULT_INVALIDATION_PATH,
                         project_id: Optional[str] = None) -> str:
    """``gcloud`` command that flushes the CDN cache of a URL map"""
    command = f'gcloud compute url-maps invalidate-cdn-cache {url_map} --path="{path_pattern}"'
    if project_id:
        command += f" --project={project_id}"
    return command + " --async"


class RollbackAdvisor:
    """Verifies a release and describes how to route traffic to it

    The advisor never changes the load balancer. It produces the steps an
    operator runs to set the path matcher's ``pathPrefixRewrite``.
    """

    def __init__(self, lister: ReleaseLister, config: DeployConfig):
        self.lister = lister
        self.storage = lister.storage
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    async def verify_release(self, version: str) -> Tuple[ReleaseInfo, int, bool]:
        """
        Check that a release holds objects

        Args:
            version: Release version

        Returns:
            (release, object count, whether index.html exists)

        Raises:
            ReleaseNotFoundError: No objects under the release prefix
        """
        release = self.lister.release_for(version)
        policy = self.lister.retry_policy

        objects = await retry_async(
            self.storage.list,
            release.prefix,
            policy=policy,
            step=f"List objects of release {version}"
        )
        if not objects:
            raise ReleaseNotFoundError(version, f"{self.storage.location}/{release.prefix}")

        index_key = release.prefix + INDEX_DOCUMENT
        has_index = await retry_async(
            self.storage.exists,
            index_key,
            policy=policy,
            step=f"Check {index_key}"
        )
        if not has_index:
            self.logger.warning(
                f"Release {version} exists but may be incomplete (no {INDEX_DOCUMENT} found)"
            )
        return release, len(objects), has_index

    def instructions(self, release: ReleaseInfo) -> RepointInstructions:
        """Build repoint instructions for ``release``"""
        location = f"{self.storage.location}/{release.prefix}"
        url_map = self.config.url_map
        project = self.config.project_id

        if not url_map:
            return RepointInstructions(
                version=release.version,
                location=location,
                console_steps=[
                    "URL map name is not configured (DEPLOY_URL_MAP_NAME)",
                    "Manually update your load balancer to serve from:",
                    f"  {location}",
                ]
            )

        rewrite = release.rewrite_path
        project_flag = f" --project={project}" if project else ""
        return RepointInstructions(
            version=release.version,
            location=location,
            rewrite_path=rewrite,
            console_steps=[
                f"Go to: {CONSOLE_LOAD_BALANCERS_URL.format(project=project or '')}",
                f"Click on your load balancer: {url_map}",
                "Click 'Edit' -> 'Host and path rules'",
                f"Update path rewrite to: {rewrite}",
                "Click 'Update'",
            ],
            commands=[
                f"gcloud compute url-maps export {url_map} --destination={URL_MAP_EXPORT_FILE}{project_flag}",
                f"# edit {URL_MAP_EXPORT_FILE}: in path matcher '{self.config.path_matcher}' "
                f"set pathPrefixRewrite: {rewrite}",
                f"gcloud compute url-maps import {url_map} --source={URL_MAP_EXPORT_FILE}{project_flag}",
            ],
            cache_invalidation=invalidation_command(url_map, DEFAULT_INVALIDATION_PATH, project)
        )
