"""Sync coordination.

The coordinator runs the two directions of a sync:

- offramp: export APIs from a source platform, then canonicalize them
- onramp: stage canonical APIs for a destination platform, then import them

Each direction checks its configuration and credentials first and is a no-op,
reported through its message, when either is missing. Failures of individual
APIs are collected rather than aborting the run, and nothing is rolled back.
"""

from collections.abc import Callable
from typing import Any

from apim_sync.client.apihub_client import ApiHubClient
from apim_sync.client.azure_client import AzureApimClient
from apim_sync.client.exceptions import ApimSyncError
from apim_sync.client.token_provider import ApiHubTokenProvider, AzureTokenProvider, TokenProvider
from apim_sync.config import HttpConfig, SyncConfig
from apim_sync.migration.exporter import ApiExporter
from apim_sync.migration.importer import ApiImporter
from apim_sync.migration.naming import group_key
from apim_sync.migration.offramp import OfframpTransformer
from apim_sync.migration.onramp import OnrampTransformer
from apim_sync.migration.staging import Stager
from apim_sync.models import (
    ExportResult,
    ImportResult,
    PlatformStatus,
    StepResult,
    SyncResult,
    TransformResult,
)
from apim_sync.platforms import (
    ApiHubPlatform,
    AzurePlatform,
    OfframpSource,
    OnrampDestination,
    get_destination_platform,
    get_source_platform,
)
from apim_sync.utils.logging import get_logger, log_error

logger = get_logger(__name__)

ClientFactory = Callable[[Any, str], Any]


def default_client_factory(http_config: HttpConfig) -> ClientFactory:
    """Build platform clients from a profile and a bearer token."""

    def factory(platform: Any, token: str) -> Any:
        if isinstance(platform, AzurePlatform):
            return AzureApimClient(platform, token, http_config)
        if isinstance(platform, ApiHubPlatform):
            return ApiHubClient(platform, token, http_config)
        raise ValueError(f"No client for platform: {platform.tag}")

    return factory


class SyncCoordinator:
    """Runs offramp and onramp for configured platforms."""

    def __init__(
        self,
        config: SyncConfig,
        stager: Stager | None = None,
        token_providers: dict[str, TokenProvider] | None = None,
        client_factory: ClientFactory | None = None,
    ):
        """Initialize coordinator.

        Args:
            config: Sync configuration
            stager: Staging area (defaults to one built from ``config.paths``)
            token_providers: Token provider per platform tag
            client_factory: Callable building a client from (profile, token)
        """
        self.config = config
        self.stager = stager or Stager(config.paths)
        self.token_providers = token_providers or {
            OfframpSource.AZURE.value: AzureTokenProvider(config.http),
            OnrampDestination.APIHUB.value: ApiHubTokenProvider(),
        }
        self.client_factory = client_factory or default_client_factory(config.http)

    def _platform_config(self, tag: str) -> Any:
        return getattr(self.config, tag)

    async def _authorize(self, platform: Any, action: str) -> tuple[str, str]:
        """Check configuration and obtain a token.

        Returns:
            Tuple of (token, message); the token is empty when ``action`` cannot run
        """
        section = self._platform_config(platform.tag)

        missing = section.missing_fields()
        if missing:
            return "", f"No {missing[0]} given, cannot {action} {platform.platform_name}."

        credentials = section.missing_credentials()
        if credentials:
            return "", f"No {credentials} given, cannot {action} {platform.platform_name}."

        token = await self.token_providers[platform.tag].resolve(section)
        if not token:
            return "", f"Could not get a valid token, cannot {action} {platform.platform_name}."

        return token, ""

    def _filters(self, api_filter: str | None, only_new: bool | None) -> tuple[str, bool]:
        api_filter = self.config.api_name if api_filter is None else api_filter
        only_new = self.config.only_new if only_new is None else only_new
        return api_filter, only_new

    async def export(
        self,
        source: OfframpSource | str,
        api_filter: str | None = None,
        only_new: bool | None = None,
    ) -> ExportResult:
        """Export a source platform's service metadata and APIs to the staging area.

        Args:
            source: Source platform tag
            api_filter: Only export this API (defaults to ``config.api_name``)
            only_new: Skip already staged APIs (defaults to ``config.only_new``)
        """
        platform = get_source_platform(source, self.config)
        api_filter, only_new = self._filters(api_filter, only_new)

        token, message = await self._authorize(platform, "export APIs from")
        if not token:
            logger.warning("export_skipped", platform=platform.tag, reason=message)
            return ExportResult(message=message, error=message)

        logger.info("export_requested", platform=platform.tag, api=api_filter, only_new=only_new)

        try:
            async with self.client_factory(platform, token) as client:
                exporter = ApiExporter(client, platform, self.stager)
                await exporter.export_service()
                return await exporter.export(api_filter, only_new)
        except ApimSyncError as e:
            log_error(logger, e, "export", platform=platform.tag)
            message = f"Export from {platform.platform_name} failed: {e}"
            return ExportResult(message=message, error=message)

    async def export_service(self, source: OfframpSource | str) -> StepResult:
        """Export only the service metadata of a source platform."""
        platform = get_source_platform(source, self.config)

        token, message = await self._authorize(platform, "export service metadata from")
        if not token:
            return StepResult(success=False, message=message)

        try:
            async with self.client_factory(platform, token) as client:
                path = await ApiExporter(client, platform, self.stager).export_service()
        except ApimSyncError as e:
            logger.error("service_export_failed", platform=platform.tag, error=str(e))
            return StepResult(success=False, message=f"Export from {platform.platform_name} failed: {e}")

        if path is None:
            return StepResult(
                success=False,
                message=f"No service metadata available from {platform.platform_name}.",
            )

        return StepResult(
            success=True,
            message=f"Exported {platform.platform_name} service metadata to {path}.",
            names=[platform.service_name],
        )

    def canonicalize(self, source: OfframpSource | str, api_filter: str | None = None) -> TransformResult:
        """Map a source platform's staged APIs to canonical records."""
        platform = get_source_platform(source, self.config)
        api_filter, _ = self._filters(api_filter, None)
        return OfframpTransformer(platform, self.stager).offramp(
            group_key(api_filter) if api_filter else ""
        )

    def stage_onramp(
        self, destination: OnrampDestination | str, api_filter: str | None = None
    ) -> TransformResult:
        """Stage canonical records in a destination platform's native form."""
        platform = get_destination_platform(destination, self.config)
        api_filter, _ = self._filters(api_filter, None)
        return OnrampTransformer(platform, self.stager).onramp(
            group_key(api_filter) if api_filter else ""
        )

    async def import_staged(
        self,
        destination: OnrampDestination | str,
        api_filter: str | None = None,
        only_new: bool | None = None,
    ) -> ImportResult | str:
        """Import staged payloads into a destination platform.

        Returns:
            ImportResult, or a message explaining why nothing was imported
        """
        platform = get_destination_platform(destination, self.config)

        token, message = await self._authorize(platform, "import APIs into")
        if not token:
            logger.warning("import_skipped", platform=platform.tag, reason=message)
            return message

        return await self._import(platform, token, api_filter, only_new)

    async def _import(
        self, platform: Any, token: str, api_filter: str | None, only_new: bool | None
    ) -> ImportResult | str:
        api_filter, only_new = self._filters(api_filter, only_new)
        try:
            async with self.client_factory(platform, token) as client:
                return await ApiImporter(client, platform, self.stager).import_apis(
                    group_key(api_filter) if api_filter else "", only_new
                )
        except ApimSyncError as e:
            log_error(logger, e, "import", platform=platform.tag)
            return f"Import into {platform.platform_name} failed: {e}"

    async def offramp(
        self,
        source: OfframpSource | str,
        api_filter: str | None = None,
        only_new: bool | None = None,
    ) -> StepResult:
        """Export a source platform's APIs, then canonicalize them."""
        platform = get_source_platform(source, self.config)

        export_result = await self.export(source, api_filter, only_new)
        if export_result.error:
            return StepResult(success=False, message=export_result.error)

        transform_result = self.canonicalize(source, api_filter)

        failures = export_result.failures + transform_result.failures
        message = (
            f"Offramped {len(transform_result.written)} APIs from {platform.platform_name} "
            f"({len(export_result.exported)} exported, {len(export_result.skipped)} unchanged)."
        )
        if failures:
            message += f" {len(failures)} failed."

        logger.info(
            "offramp_completed",
            platform=platform.tag,
            exported=len(export_result.exported),
            canonicalized=len(transform_result.written),
            failures=len(failures),
        )
        return StepResult(
            success=not failures,
            message=message,
            names=transform_result.written,
            failures=failures,
        )

    async def onramp(
        self,
        destination: OnrampDestination | str,
        api_filter: str | None = None,
        only_new: bool | None = None,
    ) -> StepResult:
        """Stage canonical APIs for a destination platform, then import them."""
        platform = get_destination_platform(destination, self.config)

        # Credentials are checked before anything is staged
        token, message = await self._authorize(platform, "import APIs into")
        if not token:
            logger.warning("onramp_skipped", platform=platform.tag, reason=message)
            return StepResult(success=False, message=message)

        transform_result = self.stage_onramp(destination, api_filter)
        import_result = await self._import(platform, token, api_filter, only_new)
        if isinstance(import_result, str):
            return StepResult(success=False, message=import_result, failures=transform_result.failures)

        failures = transform_result.failures + import_result.failures
        message = (
            f"Onramped {len(import_result.imported)} APIs to {platform.platform_name} "
            f"({len(import_result.skipped)} already present)."
        )
        if failures:
            message += f" {len(failures)} failed."

        logger.info(
            "onramp_completed",
            platform=platform.tag,
            staged=len(transform_result.written),
            imported=len(import_result.imported),
            failures=len(failures),
        )
        return StepResult(
            success=not failures,
            message=message,
            names=import_result.imported,
            failures=failures,
        )

    async def sync(
        self,
        offramp: OfframpSource | str | None = None,
        onramp: OnrampDestination | str | None = None,
    ) -> SyncResult:
        """Offramp from one platform and onramp to another.

        The two directions run independently: an offramp failure does not stop the
        onramp of whatever is already in the canonical area.
        """
        steps: list[StepResult] = []
        if offramp:
            steps.append(await self.offramp(offramp))
        if onramp:
            steps.append(await self.onramp(onramp))

        offramp_tag = OfframpSource(offramp).value if offramp else "none"
        onramp_tag = OnrampDestination(onramp).value if onramp else "none"

        failures = [failure for step in steps for failure in step.failures]
        failed_steps = [step for step in steps if not step.success]

        if failed_steps:
            message = f"Sync from {offramp_tag} to {onramp_tag} failed: " + " ".join(
                step.message for step in failed_steps
            )
            return SyncResult(result=False, message=message, failures=failures)

        return SyncResult(
            result=True,
            message=f"Sync from {offramp_tag} to {onramp_tag} successful!",
            failures=failures,
        )

    async def platform_status(self, platform: Any) -> PlatformStatus:
        """Check configuration, credentials and connectivity of one platform."""
        token, message = await self._authorize(platform, "connect to")
        if not token:
            return PlatformStatus(connected=False, message=message)

        try:
            async with self.client_factory(platform, token) as client:
                apis = await client.list_apis()
        except ApimSyncError as e:
            return PlatformStatus(connected=False, message=str(e))

        message = f"Connected to {platform.platform_name}, {len(apis)} APIs found"
        service_name = getattr(platform, "service_name", "")
        if service_name:
            message += f" in service {service_name}"

        return PlatformStatus(connected=True, message=message + ".")

    async def status(self) -> dict[str, PlatformStatus]:
        """Status of every supported platform, keyed by tag."""
        platforms = [get_source_platform(source, self.config) for source in OfframpSource] + [
            get_destination_platform(destination, self.config) for destination in OnrampDestination
        ]
        return {platform.tag: await self.platform_status(platform) for platform in platforms}

    def clean(self, platform_tag: str) -> bool:
        """Remove the staged export area of a platform."""
        return self.stager.clean(platform_tag)
