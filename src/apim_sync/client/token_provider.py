"""Bearer token acquisition for platform clients.

Token providers never raise: when no credential can be obtained they return an
empty string and the caller reports the platform as unavailable.
"""

from typing import Protocol

import httpx

from apim_sync.config import ApiHubConfig, AzureConfig, HttpConfig
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

AZURE_LOGIN_URL = "https://login.microsoftonline.com"
AZURE_MANAGEMENT_RESOURCE = "https://management.azure.com/"


class TokenProvider(Protocol):
    """Supplies a bearer credential for one platform."""

    async def resolve(self, config) -> str: ...


class AzureTokenProvider:
    """Resolves Azure management tokens.

    Precedence: the token in the configuration (supplied on the command line or
    taken from ``AZURE_TOKEN`` at startup), then a client-credentials grant with
    the configured service principal.
    """

    def __init__(
        self,
        http_config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.http_config = http_config or HttpConfig()
        self.transport = transport

    async def get_token(self, client_id: str, client_secret: str, tenant_id: str) -> str:
        """Request a token with the OAuth2 client-credentials grant.

        Returns:
            The access token, or an empty string on any failure
        """
        url = f"{AZURE_LOGIN_URL}/{tenant_id}/oauth2/token"
        form = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "resource": AZURE_MANAGEMENT_RESOURCE,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.http_config.timeout,
                verify=self.http_config.verify_ssl,
                transport=self.transport,
            ) as client:
                response = await client.post(url, data=form)
        except httpx.HTTPError as e:
            logger.warning("azure_token_request_failed", tenant_id=tenant_id, error=str(e))
            return ""

        if response.status_code != 200:
            logger.warning(
                "azure_token_rejected", tenant_id=tenant_id, status_code=response.status_code
            )
            return ""

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            logger.warning("azure_token_response_invalid", tenant_id=tenant_id)
            return ""

        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            logger.warning("azure_token_missing_from_response", tenant_id=tenant_id)
            return ""

        logger.debug("azure_token_acquired", tenant_id=tenant_id)
        return access_token

    async def resolve(self, config: AzureConfig) -> str:
        if config.token:
            return config.token

        if not config.has_client_credentials:
            logger.info("azure_credentials_missing")
            return ""

        return await self.get_token(config.client_id, config.client_secret, config.tenant_id)


class ApiHubTokenProvider:
    """Resolves API hub tokens from the configuration."""

    async def resolve(self, config: ApiHubConfig) -> str:
        if not config.token:
            logger.info("apihub_token_missing")
        return config.token
