"""Onramp: canonical records to a destination platform's native form.

Reads ``canonical/<group>/`` and writes ``export/<destination>/<group>/`` so the
importer can push the staged payloads without touching the canonical area.
"""

from pydantic import ValidationError

from apim_sync.client.exceptions import StagingError
from apim_sync.migration.staging import Stager
from apim_sync.models import ApiFailure, CanonicalApi, TransformResult
from apim_sync.platforms.base import DestinationPlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)


class OnrampTransformer:
    """Maps canonical records to one destination platform."""

    def __init__(self, platform: DestinationPlatform, stager: Stager):
        self.platform = platform
        self.stager = stager

    def onramp(self, group_filter: str = "") -> TransformResult:
        """Stage every canonical API in the destination's native form.

        APIs that were offramped from the destination itself are left out.

        Args:
            group_filter: Only process this group directory (empty = all)
        """
        result = TransformResult()
        tag = self.platform.tag

        try:
            groups = self.stager.list_canonical_groups()
        except StagingError as e:
            result.failures.append(ApiFailure(tag, "onramp", str(e)))
            return result

        logger.info("onramp_started", platform=tag, groups=len(groups))

        for group in groups:
            if group_filter and group_filter != group:
                continue

            try:
                canonical_files = self.stager.list_canonical_files(group)
            except StagingError as e:
                result.failures.append(ApiFailure(group, "onramp", str(e)))
                continue

            for canonical_file in canonical_files:
                try:
                    canonical = CanonicalApi.model_validate(self.stager.read_json(canonical_file))
                except (StagingError, ValidationError) as e:
                    logger.error("onramp_read_failed", platform=tag, file=str(canonical_file), error=str(e))
                    result.failures.append(ApiFailure(canonical_file.stem, "onramp", str(e)))
                    continue

                if canonical.platform_id == self.platform.platform_id:
                    logger.debug("onramp_same_platform_skipped", platform=tag, api=canonical.name)
                    continue

                try:
                    self.stager.write_platform_api(
                        tag, group, canonical.name, self.platform.from_canonical(canonical)
                    )
                    schema = self.stager.find_canonical_schema(group, canonical.name)
                    if schema is not None:
                        self.stager.copy_file(
                            schema, self.stager.schema_body_path(tag, group, canonical.name, "json")
                        )
                except StagingError as e:
                    logger.error("onramp_write_failed", platform=tag, api=canonical.name, error=str(e))
                    result.failures.append(ApiFailure(canonical.name, "onramp", str(e)))
                    continue

                logger.info("api_onramped", platform=tag, group=group, api=canonical.name)
                result.written.append(canonical.name)

        return result
