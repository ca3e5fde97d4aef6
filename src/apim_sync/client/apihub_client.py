"""Apigee API hub client.

Creates and updates APIs, versions and specs in an API hub instance.
"""

from typing import Any

import httpx

from apim_sync.client.base_client import BaseAPIClient
from apim_sync.config import HttpConfig
from apim_sync.platforms.apihub import ApiHubPlatform
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

API_UPDATE_MASK = "display_name,description,owner,documentation"


class ApiHubClient(BaseAPIClient):
    """Client for one API hub project/region."""

    def __init__(
        self,
        platform: ApiHubPlatform,
        token: str,
        http_config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            base_url=platform.management_url,
            token=token,
            http_config=http_config,
            transport=transport,
        )
        self.platform = platform

    async def list_apis(self) -> list[dict[str, Any]]:
        """List all registered APIs, following page tokens."""
        apis: list[dict[str, Any]] = []
        params: dict[str, Any] = {}

        while True:
            response = await self.get("apis", params=params)
            apis.extend(response.get("apis", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
            params = {"pageToken": page_token}

        logger.info("apihub_apis_listed", project=self.platform.config.project, count=len(apis))
        return apis

    async def create_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.post("apis", json_data=body, params={"apiId": api_id})

    async def update_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.patch(
            f"apis/{api_id}", json_data=body, params={"updateMask": API_UPDATE_MASK}
        )

    async def create_version(
        self, api_id: str, version_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.post(
            f"apis/{api_id}/versions", json_data=body, params={"versionId": version_id}
        )

    async def create_spec(
        self, api_id: str, version_id: str, spec_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.post(
            f"apis/{api_id}/versions/{version_id}/specs",
            json_data=body,
            params={"specId": spec_id},
        )
