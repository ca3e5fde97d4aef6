"""Per-platform profiles.

A profile knows how one platform lays out its native payloads and how its
console, portal and gateway URLs are formed. The pipeline stages only talk to
profiles, so they carry no platform-specific strings themselves.
"""

from abc import ABC, abstractmethod
from typing import Any

from apim_sync.models import CanonicalApi, PlatformApi, PlatformService, SchemaDocument


def join_url(base: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them."""
    if not base:
        return ""
    if not path:
        return base
    return base.rstrip("/") + "/" + path.lstrip("/")


class SourcePlatform(ABC):
    """A platform APIs are offramped from."""

    tag: str = ""
    platform_id: str = ""
    platform_name: str = ""

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Name of the service whose metadata file sits above the group directories."""

    @abstractmethod
    def parse_api(self, data: dict[str, Any]) -> PlatformApi:
        """Parse a native API payload."""

    @abstractmethod
    def dump_api(self, api: PlatformApi) -> dict[str, Any]:
        """Serialise an API back to its native payload, including normalised names."""

    @abstractmethod
    def parse_schema(self, data: dict[str, Any]) -> SchemaDocument:
        """Parse a native schema descriptor."""

    @abstractmethod
    def parse_service(self, data: dict[str, Any]) -> PlatformService:
        """Parse native service metadata."""

    @abstractmethod
    def console_url(self, api_name: str) -> str:
        """Deep link to the API in the platform's management console."""

    def documentation_url(self, service: PlatformService, api_name: str) -> str:
        """Developer portal page for the API, empty when the portal is unknown."""
        return ""

    def gateway_url(self, service: PlatformService, base_path: str) -> str:
        """Public URL of the API on the platform's gateway."""
        return join_url(service.gateway_url, base_path)

    def to_canonical(
        self, api: PlatformApi, service: PlatformService, canonical_name: str
    ) -> CanonicalApi:
        """Map an exported API to its canonical record."""
        return CanonicalApi(
            name=canonical_name,
            display_name=api.display_name,
            description=api.description,
            version=api.version,
            owner_email=service.publisher_email,
            owner_name=service.publisher_name,
            documentation_url=self.documentation_url(service, api.name),
            gateway_url=self.gateway_url(service, api.base_path),
            base_path=api.base_path,
            platform_id=self.platform_id,
            platform_name=self.platform_name,
            platform_resource_uri=self.console_url(api.name),
        )


class DestinationPlatform(ABC):
    """A platform canonical APIs are onramped into."""

    tag: str = ""
    platform_id: str = ""
    platform_name: str = ""

    @abstractmethod
    def resource_id(self, canonical_name: str) -> str:
        """Identifier the destination will use for a canonical API."""

    @abstractmethod
    def from_canonical(self, canonical: CanonicalApi) -> dict[str, Any]:
        """Map a canonical record to the destination's native payload."""
