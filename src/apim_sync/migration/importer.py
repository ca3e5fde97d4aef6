"""Import of staged destination payloads into API hub.

Each staged API becomes an API hub API with one version and, when an OpenAPI
document was staged alongside it, one spec. Existing APIs are updated, or left
alone when only new APIs are requested.
"""

from typing import Any, Protocol, runtime_checkable

from apim_sync.client.exceptions import ApimSyncError, ConflictError, StagingError
from apim_sync.migration.staging import Stager
from apim_sync.models import ApiFailure, ImportResult
from apim_sync.platforms.apihub import ApiHubPlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

SPEC_ID = "openapi"


@runtime_checkable
class DestinationClient(Protocol):
    """Write access to a destination platform's catalog."""

    async def list_apis(self) -> list[dict[str, Any]]: ...

    async def create_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def update_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def create_version(
        self, api_id: str, version_id: str, body: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def create_spec(
        self, api_id: str, version_id: str, spec_id: str, body: dict[str, Any]
    ) -> dict[str, Any]: ...


class ApiImporter:
    """Pushes staged API hub payloads to API hub."""

    def __init__(self, client: DestinationClient, platform: ApiHubPlatform, stager: Stager):
        self.client = client
        self.platform = platform
        self.stager = stager

    async def import_apis(self, group_filter: str = "", only_new: bool = False) -> ImportResult:
        """Import every staged API.

        Args:
            group_filter: Only import this group directory (empty = all)
            only_new: Leave APIs that already exist in API hub untouched

        Returns:
            ImportResult with imported and skipped API ids and per-API failures
        """
        result = ImportResult()
        tag = self.platform.tag

        try:
            groups = self.stager.list_groups(tag)
        except StagingError as e:
            result.failures.append(ApiFailure(tag, "import", str(e)))
            return result

        logger.info("import_started", platform=tag, groups=len(groups), only_new=only_new)

        for group in groups:
            if group_filter and group_filter != group:
                continue

            try:
                api_files = self.stager.list_api_files(tag, group)
            except StagingError as e:
                result.failures.append(ApiFailure(group, "import", str(e)))
                continue

            for api_file in api_files:
                try:
                    staged = self.stager.read_json(api_file)
                except StagingError as e:
                    result.failures.append(ApiFailure(api_file.stem, "import", str(e)))
                    continue

                api_id = staged.get("name") if isinstance(staged, dict) else None
                if not api_id:
                    result.failures.append(
                        ApiFailure(api_file.stem, "import", "Staged payload has no API name")
                    )
                    continue

                try:
                    imported = await self._import_api(group, api_file.stem, api_id, staged, only_new)
                except (ApimSyncError, OSError) as e:
                    logger.error("api_import_failed", platform=tag, api=api_id, error=str(e))
                    result.failures.append(ApiFailure(api_id, "import", str(e)))
                    continue

                if imported:
                    logger.info("api_imported", platform=tag, api=api_id)
                    result.imported.append(api_id)
                else:
                    logger.debug("api_already_imported", platform=tag, api=api_id)
                    result.skipped.append(api_id)

        return result

    async def _import_api(
        self, group: str, staged_name: str, api_id: str, staged: dict[str, Any], only_new: bool
    ) -> bool:
        """Create or update one API with its version and spec.

        Returns:
            False if the API already existed and was left untouched
        """
        body = self.platform.api_body(staged)

        try:
            await self.client.create_api(api_id, body)
        except ConflictError:
            if only_new:
                return False
            await self.client.update_api(api_id, body)

        version_id = (staged.get("version") or {}).get("name") or "v1"
        try:
            await self.client.create_version(api_id, version_id, self.platform.version_body(staged))
        except ConflictError:
            logger.debug("version_exists", api=api_id, version=version_id)

        schema = self.stager.find_schema_body(self.platform.tag, group, staged_name)
        if schema is not None:
            spec = self.platform.spec_body(staged.get("displayName", api_id), schema.read_bytes())
            try:
                await self.client.create_spec(api_id, version_id, SPEC_ID, spec)
            except ConflictError:
                logger.debug("spec_exists", api=api_id, version=version_id)

        return True
