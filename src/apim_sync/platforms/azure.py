"""Azure API Management profile."""

import copy
import json
from typing import Any

from pydantic import ValidationError

from apim_sync.client.exceptions import TransformationError
from apim_sync.config import AzureConfig
from apim_sync.models import PlatformApi, PlatformService, SchemaDocument
from apim_sync.platforms.base import SourcePlatform, join_url

AZURE_PORTAL_URL = "https://portal.azure.com"
AZURE_MANAGEMENT_URL = "https://management.azure.com"


def service_path(config: AzureConfig) -> str:
    """Resource path of the API Management service."""
    return (
        f"/subscriptions/{config.subscription}"
        f"/resourceGroups/{config.resource_group}"
        f"/providers/Microsoft.ApiManagement/service/{config.service_name}"
    )


def _schema_type(properties: dict[str, Any]) -> str:
    """Derive the body file extension from a schema descriptor.

    Only JSON schemas get the ``json`` extension; XSD and WADL grammars
    (``...+xml``) are staged as ``xml`` so they are never taken for OpenAPI.
    """
    if properties.get("schemaType"):
        return properties["schemaType"]

    content_type = (properties.get("contentType") or "").lower()
    if "wsdl" in content_type:
        return "wsdl"
    if "graphql" in content_type:
        return "graphql"
    if "yaml" in content_type:
        return "yaml"
    if not content_type or content_type.endswith("json"):
        return "json"
    if content_type.endswith("xml"):
        return "xml"
    # application/vnd.oai.openapi is the YAML form of an OpenAPI document
    if content_type.endswith("openapi"):
        return "yaml"
    return "txt"


def _document_text(properties: dict[str, Any]) -> str:
    document = properties.get("document", properties.get("value", ""))
    if isinstance(document, dict):
        # WSDL and YAML documents arrive wrapped as {"value": "<text>"}
        if isinstance(document.get("value"), str):
            return document["value"]
        return json.dumps(document, indent=2)
    return document or ""


class AzurePlatform(SourcePlatform):
    """Azure API Management native formats and URL templates."""

    tag = "azure"
    platform_id = "azure-api-management"
    platform_name = "Azure API Management"

    def __init__(self, config: AzureConfig):
        self.config = config

    @property
    def service_name(self) -> str:
        return self.config.service_name

    @property
    def management_url(self) -> str:
        return AZURE_MANAGEMENT_URL + service_path(self.config)

    def parse_api(self, data: dict[str, Any]) -> PlatformApi:
        if not isinstance(data, dict):
            raise TransformationError("Azure API payload is not a JSON object")

        properties = data.get("properties") or {}
        try:
            return PlatformApi(
                id=data.get("id") or "",
                name=data.get("name") or "",
                display_name=properties.get("displayName") or "",
                description=properties.get("description") or "",
                version=properties.get("apiVersion") or "",
                base_path=properties.get("path") or "",
                protocols=properties.get("protocols") or [],
                service_url=properties.get("serviceUrl") or "",
                authentication_settings=properties.get("authenticationSettings") or {},
                subscription_key_parameter_names=(
                    properties.get("subscriptionKeyParameterNames") or {}
                ),
                is_current=properties.get("isCurrent") is not False,
                raw=data,
            )
        except ValidationError as e:
            raise TransformationError(f"Invalid Azure API payload: {e}") from e

    def dump_api(self, api: PlatformApi) -> dict[str, Any]:
        data = copy.deepcopy(api.raw)
        data["id"] = api.id
        data["name"] = api.name
        properties = data.setdefault("properties", {})
        properties["displayName"] = api.display_name
        properties["description"] = api.description
        properties["apiVersion"] = api.version
        properties["path"] = api.base_path
        return data

    def parse_schema(self, data: dict[str, Any]) -> SchemaDocument:
        properties = data.get("properties") or {}
        return SchemaDocument(
            id=data.get("id") or "",
            schema_type=_schema_type(properties),
            content_type=properties.get("contentType") or "",
            document=_document_text(properties),
            raw=data,
        )

    def parse_service(self, data: dict[str, Any]) -> PlatformService:
        if not isinstance(data, dict):
            raise TransformationError("Azure service payload is not a JSON object")

        properties = data.get("properties") or {}
        return PlatformService(
            name=data.get("name") or "",
            publisher_email=properties.get("publisherEmail") or "",
            publisher_name=properties.get("publisherName") or "",
            developer_portal_url=properties.get("developerPortalUrl") or "",
            gateway_url=properties.get("gatewayUrl") or "",
        )

    def console_url(self, api_name: str) -> str:
        return f"{AZURE_PORTAL_URL}/#resource{service_path(self.config)}/overview?apiName={api_name}"

    def documentation_url(self, service: PlatformService, api_name: str) -> str:
        if not service.developer_portal_url:
            return ""
        return join_url(service.developer_portal_url, "api-details") + f"#api={api_name}"
