"""Apigee API hub profile."""

import base64
import re
from typing import Any

from apim_sync.config import ApiHubConfig
from apim_sync.models import CanonicalApi
from apim_sync.platforms.base import DestinationPlatform

APIHUB_URL = "https://apihub.googleapis.com/v1"
APIHUB_CONSOLE_URL = "https://console.cloud.google.com/apigee/api-hub/apis"
SPEC_TYPE_ATTRIBUTE = "system-spec-type"

_INVALID_ID_CHARS = re.compile(r"[^a-z0-9-]+")


class ApiHubPlatform(DestinationPlatform):
    """API hub native formats and URL templates."""

    tag = "apihub"
    platform_id = "apigee-api-hub"
    platform_name = "Apigee API hub"

    def __init__(self, config: ApiHubConfig):
        self.config = config

    @property
    def management_url(self) -> str:
        return f"{APIHUB_URL}/projects/{self.config.project}/locations/{self.config.region}"

    def resource_id(self, canonical_name: str) -> str:
        # API hub ids are lowercase letters, digits and hyphens
        return _INVALID_ID_CHARS.sub("-", canonical_name.lower()).strip("-")

    def console_url(self, api_id: str) -> str:
        return (
            f"{APIHUB_CONSOLE_URL}/{self.config.region}/{api_id}"
            f"?project={self.config.project}"
        )

    def from_canonical(self, canonical: CanonicalApi) -> dict[str, Any]:
        api: dict[str, Any] = {
            "name": self.resource_id(canonical.name),
            "displayName": canonical.display_name or canonical.name,
            "description": canonical.description,
        }

        if canonical.owner_email:
            api["owner"] = {"displayName": canonical.owner_name, "email": canonical.owner_email}

        if canonical.documentation_url:
            api["documentation"] = {"externalUri": canonical.documentation_url}

        api["version"] = {
            "name": self.resource_id(canonical.version or "v1"),
            "displayName": canonical.version or "v1",
        }
        if canonical.platform_name:
            api["version"]["description"] = f"Imported from {canonical.platform_name}"

        # Kept in the staged file for traceability, never sent to API hub
        api["source"] = {
            "canonicalName": canonical.name,
            "platformId": canonical.platform_id,
            "platformName": canonical.platform_name,
            "platformResourceUri": canonical.platform_resource_uri,
            "gatewayUrl": canonical.gateway_url,
            "basePath": canonical.base_path,
        }
        return api

    def api_body(self, staged: dict[str, Any]) -> dict[str, Any]:
        """Request body for creating or updating an API from a staged payload."""
        return {
            key: staged[key]
            for key in ("displayName", "description", "owner", "documentation")
            if key in staged
        }

    def version_body(self, staged: dict[str, Any]) -> dict[str, Any]:
        version = staged.get("version") or {}
        body = {"displayName": version.get("displayName", "v1")}
        if version.get("description"):
            body["description"] = version["description"]
        if "documentation" in staged:
            body["documentation"] = staged["documentation"]
        return body

    def spec_body(self, display_name: str, content: bytes) -> dict[str, Any]:
        """Request body for uploading an OpenAPI document."""
        return {
            "displayName": f"{display_name} OpenAPI",
            "specType": {
                "attribute": f"projects/{self.config.project}/locations/{self.config.region}"
                f"/attributes/{SPEC_TYPE_ATTRIBUTE}",
                "enumValues": {"values": [{"id": "openapi"}]},
            },
            "contents": {
                "contents": base64.b64encode(content).decode("ascii"),
                "mimeType": "application/json",
            },
        }
