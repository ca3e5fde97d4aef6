"""Configuration management for APIM Sync using Pydantic.

Configuration is built once at the boundary (CLI or HTTP service startup) from a
YAML file or from environment variables and then passed explicitly into the
pipeline. Nothing below the boundary reads the process environment.
"""

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathConfig(BaseModel):
    """Configuration for the staging area layout."""

    base_dir: str = Field(default=".", description="Root directory for staged data")
    export_dir: str = Field(default="export", description="Per-platform native artifacts")
    canonical_dir: str = Field(default="canonical", description="Platform-agnostic artifacts")


class AzureConfig(BaseModel):
    """Configuration for an Azure API Management service."""

    subscription: str = Field(default="", description="The Azure subscription ID")
    resource_group: str = Field(default="", description="The Azure resource group")
    service_name: str = Field(default="", description="The API Management service name")
    token: str = Field(default="", description="Pre-supplied bearer token")
    client_id: str = Field(default="", description="Service principal client ID")
    client_secret: str = Field(default="", description="Service principal client secret")
    tenant_id: str = Field(default="", description="Azure AD tenant ID")
    api_version: str = Field(default="2022-08-01", description="Management API version")

    def missing_fields(self) -> list[str]:
        """Return the names of required identifiers that are not set."""
        required = {
            "subscription": self.subscription,
            "resource group": self.resource_group,
            "service name": self.service_name,
        }
        return [name for name, value in required.items() if not value]

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.tenant_id)

    def missing_credentials(self) -> str:
        """Describe the credentials to set when neither a token nor a service principal is given."""
        if self.token or self.has_client_credentials:
            return ""
        return "client id, secret or tenant id"


class ApiHubConfig(BaseModel):
    """Configuration for an Apigee API hub instance."""

    project: str = Field(default="", description="The Google Cloud project")
    region: str = Field(default="", description="The API hub region")
    token: str = Field(default="", description="Pre-supplied bearer token")

    def missing_fields(self) -> list[str]:
        """Return the names of required identifiers that are not set."""
        required = {"project": self.project, "region": self.region}
        return [name for name, value in required.items() if not value]

    def missing_credentials(self) -> str:
        return "" if self.token else "token"


class HttpConfig(BaseModel):
    """HTTP client settings shared by all platform clients."""

    timeout: int = Field(default=30, ge=1, le=600, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    log_payloads: bool = Field(
        default=False,
        description="Log request/response payloads at DEBUG level (secrets are redacted)",
    )
    max_payload_size: int = Field(
        default=10000, ge=100, le=1000000, description="Maximum logged payload size"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Console log level")
    file_level: str = Field(default="DEBUG", description="File log level")
    format: str = Field(default="json", description="Log file format (json or console)")
    file: str | None = Field(default=None, description="Log file path")

    @field_validator("level", "file_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        v_lower = v.lower()
        if v_lower not in ("json", "console"):
            raise ValueError("Log format must be one of: json, console")
        return v_lower


class SyncConfig(BaseSettings):
    """Main configuration."""

    model_config = SettingsConfigDict(
        env_prefix="APIM_SYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    azure: AzureConfig = Field(default_factory=AzureConfig, description="Azure source")
    apihub: ApiHubConfig = Field(default_factory=ApiHubConfig, description="API hub destination")
    paths: PathConfig = Field(default_factory=PathConfig, description="Staging paths")
    http: HttpConfig = Field(default_factory=HttpConfig, description="HTTP client settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging")

    only_new: bool = Field(default=False, description="Only process newly discovered APIs")
    api_name: str = Field(default="", description="Restrict processing to a single API")


def load_config_from_yaml(config_path: str | Path) -> SyncConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        SyncConfig: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is empty or references an unset variable
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        raise ValueError(f"Empty configuration file: {config_path}")

    return SyncConfig(**_expand_env_vars(config_data))


# Conventional variable names used by the Azure and Google tooling
ENV_MAPPING: dict[str, tuple[str, str]] = {
    "AZURE_SUBSCRIPTION_ID": ("azure", "subscription"),
    "AZURE_RESOURCE_GROUP": ("azure", "resource_group"),
    "AZURE_SERVICE_NAME": ("azure", "service_name"),
    "AZURE_TOKEN": ("azure", "token"),
    "AZURE_CLIENT_ID": ("azure", "client_id"),
    "AZURE_CLIENT_SECRET": ("azure", "client_secret"),
    "AZURE_TENANT_ID": ("azure", "tenant_id"),
    "APIGEE_PROJECT": ("apihub", "project"),
    "APIGEE_REGION": ("apihub", "region"),
    "APIGEE_TOKEN": ("apihub", "token"),
}


def config_from_env(environ: Mapping[str, str] | None = None) -> SyncConfig:
    """Build configuration from conventional environment variable names.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        SyncConfig: Configuration with platform sections populated
    """
    if environ is None:
        environ = os.environ

    sections: dict[str, dict[str, str]] = {"azure": {}, "apihub": {}}
    for var_name, (section, field_name) in ENV_MAPPING.items():
        value = environ.get(var_name)
        if value:
            sections[section][field_name] = value

    return SyncConfig(
        azure=AzureConfig(**sections["azure"]),
        apihub=ApiHubConfig(**sections["apihub"]),
    )


def _expand_env_vars(data):
    """Recursively expand ``${VAR_NAME}`` references in config values."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        if data.startswith("${") and data.endswith("}"):
            var_name = data[2:-1]
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(
                    f"Environment variable '{var_name}' not found. "
                    f"Please set it in your environment or .env file."
                )
            return env_value
        return data
    else:
        return data
