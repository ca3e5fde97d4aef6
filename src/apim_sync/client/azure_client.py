"""Azure API Management client.

Reads APIs, schemas and service metadata from the Azure Resource Manager
endpoints of one API Management service.
"""

from typing import Any

import httpx

from apim_sync.client.base_client import BaseAPIClient
from apim_sync.config import HttpConfig
from apim_sync.models import PlatformApi, SchemaDocument
from apim_sync.platforms.azure import AzurePlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)


class AzureApimClient(BaseAPIClient):
    """Client for a single Azure API Management service."""

    def __init__(
        self,
        platform: AzurePlatform,
        token: str,
        http_config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Azure client.

        Args:
            platform: Azure profile carrying the service identifiers
            token: Azure management bearer token
            http_config: HTTP client settings
            transport: Optional transport override (used by tests)
        """
        super().__init__(
            base_url=platform.management_url,
            token=token,
            http_config=http_config,
            default_params={"api-version": platform.config.api_version},
            transport=transport,
        )
        self.platform = platform

    async def _get_all(self, endpoint: str) -> list[dict[str, Any]]:
        """Fetch every item of a list endpoint, following ``nextLink``."""
        items: list[dict[str, Any]] = []
        next_endpoint: str | None = endpoint

        while next_endpoint:
            response = await self.get(next_endpoint)
            items.extend(response.get("value", []))
            next_endpoint = response.get("nextLink")

        return items

    async def list_apis(self) -> list[dict[str, Any]]:
        """List the raw resource of every API of the service, revisions included.

        Payloads are returned unparsed so one malformed API can be skipped on
        its own by the caller.
        """
        raw_apis = await self._get_all("apis")
        logger.info("azure_apis_listed", service=self.platform.service_name, count=len(raw_apis))
        return raw_apis

    async def get_api(self, name: str) -> PlatformApi:
        """Fetch a single API by name."""
        return self.platform.parse_api(await self.get(f"apis/{name}"))

    async def get_schema(self, api_name: str) -> SchemaDocument:
        """Fetch the first schema attached to an API.

        Returns an empty document when the API has no schema.
        """
        schemas = await self._get_all(f"apis/{api_name}/schemas")
        if not schemas:
            return SchemaDocument()
        return self.platform.parse_schema(schemas[0])

    async def get_service_metadata(self) -> dict[str, Any]:
        """Fetch the raw service resource."""
        return await self.get("")
