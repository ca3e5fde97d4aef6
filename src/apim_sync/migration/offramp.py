"""Offramp: staged platform APIs to canonical records.

Reads ``export/<platform>/<group>/`` and writes ``canonical/<group>/``. Each
canonical name is the qualified platform name plus ``-<platform tag>``, so the
same API offramped from two platforms never collides.
"""

from apim_sync.client.exceptions import StagingError, TransformationError
from apim_sync.migration.naming import is_revision
from apim_sync.migration.staging import Stager
from apim_sync.models import ApiFailure, PlatformService, TransformResult
from apim_sync.platforms.base import SourcePlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)


def canonical_name(qualified_name: str, platform_tag: str) -> str:
    return f"{qualified_name}-{platform_tag}"


class OfframpTransformer:
    """Maps one platform's staged APIs to the canonical form."""

    def __init__(self, platform: SourcePlatform, stager: Stager):
        self.platform = platform
        self.stager = stager

    def load_service(self) -> PlatformService:
        """Load staged service metadata; missing or unreadable metadata is empty."""
        try:
            data = self.stager.read_service(self.platform.tag, self.platform.service_name)
            if data is None:
                logger.info("service_metadata_missing", platform=self.platform.tag)
                return PlatformService()
            return self.platform.parse_service(data)
        except (StagingError, TransformationError) as e:
            logger.warning("service_metadata_unreadable", platform=self.platform.tag, error=str(e))
            return PlatformService()

    def offramp(self, group_filter: str = "") -> TransformResult:
        """Canonicalize every staged API of the platform.

        Args:
            group_filter: Only process this group directory (empty = all)

        Returns:
            TransformResult with the canonical names written and per-API failures
        """
        result = TransformResult()
        tag = self.platform.tag

        try:
            groups = self.stager.list_groups(tag)
        except StagingError as e:
            logger.error("offramp_listing_failed", platform=tag, error=str(e))
            result.failures.append(ApiFailure(tag, "offramp", str(e)))
            return result

        service = self.load_service()
        logger.info("offramp_started", platform=tag, groups=len(groups))

        for group in groups:
            if group_filter and group_filter != group:
                continue

            try:
                api_files = self.stager.list_api_files(tag, group)
            except StagingError as e:
                result.failures.append(ApiFailure(group, "offramp", str(e)))
                continue

            for api_file in api_files:
                try:
                    api = self.platform.parse_api(self.stager.read_json(api_file))
                except (StagingError, TransformationError) as e:
                    logger.error("offramp_read_failed", platform=tag, file=str(api_file), error=str(e))
                    result.failures.append(ApiFailure(api_file.stem, "offramp", str(e)))
                    continue

                if not api.name or is_revision(api.name):
                    continue

                name = canonical_name(api.name, tag)
                canonical = self.platform.to_canonical(api, service, name)

                try:
                    self.stager.write_canonical(group, name, canonical.to_dict())

                    schema_body = self.stager.find_schema_body(tag, group, api.name)
                    if schema_body is not None:
                        self.stager.copy_file(schema_body, self.stager.canonical_schema_path(group, name))
                except StagingError as e:
                    logger.error("offramp_write_failed", platform=tag, api=name, error=str(e))
                    result.failures.append(ApiFailure(name, "offramp", str(e)))
                    continue

                logger.info("api_canonicalized", platform=tag, group=group, api=name)
                result.written.append(name)

        return result
