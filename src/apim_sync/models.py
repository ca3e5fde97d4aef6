"""Data models shared by the staging pipeline.

Platform-native payloads are parsed into the platform-neutral models below by
the per-platform profiles in :mod:`apim_sync.platforms`. The canonical record
serialises with camelCase keys so staged files stay readable by other tooling.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlatformApi(BaseModel):
    """Platform-native API descriptor."""

    id: str = ""
    name: str = ""
    display_name: str = ""
    description: str = ""
    version: str = ""
    base_path: str = ""
    protocols: list[str] = Field(default_factory=list)
    service_url: str = ""
    authentication_settings: dict[str, Any] = Field(default_factory=dict)
    subscription_key_parameter_names: dict[str, str] = Field(default_factory=dict)
    is_current: bool = True

    # Untouched platform payload, kept so re-serialisation is lossless
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class SchemaDocument(BaseModel):
    """OpenAPI/WSDL document attached to an API."""

    id: str = ""
    schema_type: str = "json"
    content_type: str = ""
    document: str = ""
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def present(self) -> bool:
        return bool(self.id)


class PlatformService(BaseModel):
    """Account/tenant metadata for a platform service."""

    name: str = ""
    publisher_email: str = ""
    publisher_name: str = ""
    developer_portal_url: str = ""
    gateway_url: str = ""


class CanonicalApi(BaseModel):
    """Platform-agnostic API record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    display_name: str = ""
    description: str = ""
    version: str = ""
    owner_email: str = ""
    owner_name: str = ""
    documentation_url: str = ""
    gateway_url: str = ""
    base_path: str = ""
    platform_id: str = ""
    platform_name: str = ""
    platform_resource_uri: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise with camelCase keys."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class NormalizedName:
    """Result of normalising a platform API name."""

    group_key: str
    qualified_name: str
    qualified_display_name: str


@dataclass
class ApiFailure:
    """A single API that could not be processed in some pipeline stage."""

    api_name: str
    stage: str
    message: str

    def __str__(self) -> str:
        return f"{self.stage} {self.api_name}: {self.message}"


@dataclass
class ExportResult:
    """Outcome of exporting APIs from a platform."""

    exported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[ApiFailure] = field(default_factory=list)
    message: str = ""
    # Set when nothing could be exported at all (e.g. the API listing failed)
    error: str = ""


@dataclass
class TransformResult:
    """Outcome of an offramp or onramp transformation."""

    written: list[str] = field(default_factory=list)
    failures: list[ApiFailure] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of importing staged APIs into a destination platform."""

    imported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[ApiFailure] = field(default_factory=list)


@dataclass
class StepResult:
    """Outcome of one direction (offramp or onramp) of a sync."""

    success: bool
    message: str
    names: list[str] = field(default_factory=list)
    failures: list[ApiFailure] = field(default_factory=list)


@dataclass
class SyncResult:
    """Aggregate outcome of a sync request."""

    result: bool
    message: str
    failures: list[ApiFailure] = field(default_factory=list)


@dataclass
class PlatformStatus:
    """Connection status of a configured platform."""

    connected: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"connected": self.connected, "message": self.message}
