"""Export of platform APIs into the staging area.

The exporter lists every API of a source platform, normalises its name and
writes its native payload (plus schema, when one exists) under
``export/<platform>/<group>/``.
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from apim_sync.client.exceptions import ApimSyncError, StagingError, TransformationError
from apim_sync.migration.naming import is_revision, normalize
from apim_sync.migration.staging import Stager
from apim_sync.models import ApiFailure, ExportResult, PlatformApi, SchemaDocument
from apim_sync.platforms.base import SourcePlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class SourceClient(Protocol):
    """Read access to a source platform's management API."""

    async def list_apis(self) -> list[dict[str, Any]]: ...

    async def get_api(self, name: str) -> PlatformApi: ...

    async def get_schema(self, api_name: str) -> SchemaDocument: ...

    async def get_service_metadata(self) -> dict[str, Any]: ...


class ApiExporter:
    """Exports APIs of one source platform to the staging area."""

    def __init__(self, client: SourceClient, platform: SourcePlatform, stager: Stager):
        """Initialize exporter.

        Args:
            client: Client for the source platform
            platform: Profile of the source platform
            stager: Staging area
        """
        self.client = client
        self.platform = platform
        self.stager = stager

    async def export(self, api_filter: str = "", only_new: bool = False) -> ExportResult:
        """Export all matching APIs.

        Args:
            api_filter: Only export the API with this raw or qualified name (empty = all)
            only_new: Skip APIs whose staged file already exists

        Returns:
            ExportResult listing exported and skipped qualified names and failures
        """
        result = ExportResult()
        tag = self.platform.tag

        try:
            payloads = await self.client.list_apis()
        except ApimSyncError as e:
            logger.error("api_listing_failed", platform=tag, error=str(e))
            result.error = f"Could not list {self.platform.platform_name} APIs: {e}"
            result.message = result.error
            return result

        logger.info("export_started", platform=tag, api_count=len(payloads), only_new=only_new)

        for payload in payloads:
            try:
                api = self.platform.parse_api(payload)
            except TransformationError as e:
                raw_name = payload.get("name") if isinstance(payload, dict) else None
                logger.error("api_payload_invalid", platform=tag, api=raw_name, error=str(e))
                result.failures.append(ApiFailure(raw_name or "<unnamed>", "export", str(e)))
                continue

            raw_name = api.name
            if not raw_name or is_revision(raw_name):
                logger.debug("revision_skipped", platform=tag, api=raw_name)
                continue

            names = normalize(raw_name, api.version, api.display_name)
            if api_filter and api_filter not in (raw_name, names.qualified_name):
                continue

            if only_new and self.stager.api_exists(tag, names.group_key, names.qualified_name):
                logger.debug("api_already_staged", platform=tag, api=names.qualified_name)
                result.skipped.append(names.qualified_name)
                continue

            api.name = names.qualified_name
            if names.qualified_display_name:
                api.display_name = names.qualified_display_name

            try:
                self.stager.write_platform_api(
                    tag, names.group_key, names.qualified_name, self.platform.dump_api(api)
                )
            except StagingError as e:
                logger.error("api_export_failed", platform=tag, api=names.qualified_name, error=str(e))
                result.failures.append(ApiFailure(names.qualified_name, "export", str(e)))
                continue

            schema = await self._fetch_schema(raw_name)
            if schema.present:
                try:
                    self.stager.write_schema(
                        tag,
                        names.group_key,
                        names.qualified_name,
                        schema.raw,
                        schema.schema_type,
                        schema.document,
                    )
                except StagingError as e:
                    logger.error(
                        "schema_export_failed", platform=tag, api=names.qualified_name, error=str(e)
                    )
                    result.failures.append(ApiFailure(names.qualified_name, "export", str(e)))

            logger.info(
                "api_exported",
                platform=tag,
                api=names.qualified_name,
                group=names.group_key,
                schema=schema.present,
            )
            result.exported.append(names.qualified_name)

        result.message = (
            f"Exported {len(result.exported)} {self.platform.platform_name} APIs"
            f" ({len(result.skipped)} unchanged, {len(result.failures)} failed)."
        )
        return result

    async def export_service(self) -> Path | None:
        """Export the platform's service metadata.

        Returns:
            Path of the written file, or None when the metadata is unavailable
        """
        try:
            service = await self.client.get_service_metadata()
        except ApimSyncError as e:
            logger.warning("service_export_failed", platform=self.platform.tag, error=str(e))
            return None

        if not service:
            return None

        try:
            path = self.stager.write_service(self.platform.tag, self.platform.service_name, service)
        except StagingError as e:
            logger.warning("service_export_failed", platform=self.platform.tag, error=str(e))
            return None

        logger.info("service_exported", platform=self.platform.tag, path=str(path))
        return path

    async def _fetch_schema(self, api_name: str) -> SchemaDocument:
        """Fetch an API's schema; any failure means no schema."""
        try:
            return await self.client.get_schema(api_name)
        except ApimSyncError as e:
            logger.debug("schema_unavailable", platform=self.platform.tag, api=api_name, error=str(e))
            return SchemaDocument()
