"""
Shared fixtures for the apim-sync test suite.

Provides:
- Staging areas rooted in tmp_path
- Sample Azure API Management payloads
- In-memory source and destination clients
"""

from typing import Any

import pytest

from apim_sync.client.exceptions import ConflictError, NotFoundError
from apim_sync.config import ApiHubConfig, AzureConfig, PathConfig, SyncConfig
from apim_sync.migration.staging import Stager
from apim_sync.models import PlatformApi, SchemaDocument
from apim_sync.platforms import ApiHubPlatform, AzurePlatform

SERVICE_ID = (
    "/subscriptions/sub-1/resourceGroups/rg-1"
    "/providers/Microsoft.ApiManagement/service/contoso"
)


def azure_api(
    name: str,
    version: str = "",
    path: str = "",
    display_name: str = "",
    description: str = "",
) -> dict[str, Any]:
    """Build an Azure API resource as returned by the management API."""
    return {
        "id": f"{SERVICE_ID}/apis/{name}",
        "type": "Microsoft.ApiManagement/service/apis",
        "name": name,
        "properties": {
            "displayName": display_name or name,
            "description": description,
            "apiVersion": version,
            "path": path,
            "protocols": ["https"],
            "serviceUrl": f"https://backend.example.com/{path}",
            "isCurrent": True,
        },
    }


def azure_schema(api_name: str, document: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "id": f"{SERVICE_ID}/apis/{api_name}/schemas/default",
        "name": "default",
        "properties": {
            "contentType": "application/vnd.oai.openapi.components+json",
            "document": document or {"openapi": "3.0.1", "info": {"title": api_name}},
        },
    }


def azure_service() -> dict[str, Any]:
    return {
        "id": SERVICE_ID,
        "name": "contoso",
        "properties": {
            "publisherEmail": "api@contoso.com",
            "publisherName": "Contoso",
            "developerPortalUrl": "https://contoso.developer.azure-api.net",
            "gatewayUrl": "https://contoso.azure-api.net",
        },
    }


class FakeSourceClient:
    """In-memory source client serving Azure-shaped payloads."""

    def __init__(
        self,
        platform: AzurePlatform,
        apis: list[dict[str, Any]],
        schemas: dict[str, dict[str, Any]] | None = None,
        service: dict[str, Any] | None = None,
    ):
        self.platform = platform
        self.apis = apis
        self.schemas = schemas or {}
        self.service = service if service is not None else azure_service()
        self.schema_requests: list[str] = []
        self.fail_listing: Exception | None = None

    async def list_apis(self) -> list[dict[str, Any]]:
        if self.fail_listing is not None:
            raise self.fail_listing
        return list(self.apis)

    async def get_api(self, name: str) -> PlatformApi:
        for api in self.apis:
            if api["name"] == name:
                return self.platform.parse_api(api)
        raise NotFoundError("Resource not found", status_code=404)

    async def get_schema(self, api_name: str) -> SchemaDocument:
        self.schema_requests.append(api_name)
        schema = self.schemas.get(api_name)
        if schema is None:
            return SchemaDocument()
        return self.platform.parse_schema(schema)

    async def get_service_metadata(self) -> dict[str, Any]:
        return self.service

    async def __aenter__(self) -> "FakeSourceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        pass


class FakeDestinationClient:
    """In-memory API hub catalog."""

    def __init__(self) -> None:
        self.apis: dict[str, dict[str, Any]] = {}
        self.versions: dict[tuple[str, str], dict[str, Any]] = {}
        self.specs: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.updates: list[str] = []

    async def list_apis(self) -> list[dict[str, Any]]:
        return [{"name": api_id, **body} for api_id, body in self.apis.items()]

    async def create_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if api_id in self.apis:
            raise ConflictError("Resource conflict (may already exist)", status_code=409)
        self.apis[api_id] = body
        return body

    async def update_api(self, api_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self.apis[api_id] = body
        self.updates.append(api_id)
        return body

    async def create_version(
        self, api_id: str, version_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        if (api_id, version_id) in self.versions:
            raise ConflictError("Resource conflict (may already exist)", status_code=409)
        self.versions[(api_id, version_id)] = body
        return body

    async def create_spec(
        self, api_id: str, version_id: str, spec_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        key = (api_id, version_id, spec_id)
        if key in self.specs:
            raise ConflictError("Resource conflict (may already exist)", status_code=409)
        self.specs[key] = body
        return body

    async def __aenter__(self) -> "FakeDestinationClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        pass


@pytest.fixture
def paths(tmp_path) -> PathConfig:
    return PathConfig(base_dir=str(tmp_path))


@pytest.fixture
def stager(paths) -> Stager:
    return Stager(paths)


@pytest.fixture
def azure_config() -> AzureConfig:
    return AzureConfig(
        subscription="sub-1",
        resource_group="rg-1",
        service_name="contoso",
        token="azure-token",
    )


@pytest.fixture
def apihub_config() -> ApiHubConfig:
    return ApiHubConfig(project="my-project", region="us-central1", token="gcp-token")


@pytest.fixture
def azure_platform(azure_config) -> AzurePlatform:
    return AzurePlatform(azure_config)


@pytest.fixture
def apihub_platform(apihub_config) -> ApiHubPlatform:
    return ApiHubPlatform(apihub_config)


@pytest.fixture
def sync_config(azure_config, apihub_config, paths) -> SyncConfig:
    return SyncConfig(azure=azure_config, apihub=apihub_config, paths=paths)


@pytest.fixture
def sample_apis() -> list[dict[str, Any]]:
    return [
        azure_api("orders-v2", version="v2", path="orders", display_name="Orders"),
        azure_api("billing", version="v1", path="billing", display_name="Billing"),
        azure_api("billing;rev=2", version="v1", path="billing", display_name="Billing"),
    ]


@pytest.fixture
def source_client(azure_platform, sample_apis) -> FakeSourceClient:
    return FakeSourceClient(
        azure_platform,
        sample_apis,
        schemas={"orders-v2": azure_schema("orders-v2")},
    )


@pytest.fixture
def destination_client() -> FakeDestinationClient:
    return FakeDestinationClient()
