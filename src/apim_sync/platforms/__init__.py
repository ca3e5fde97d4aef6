"""Supported API management platforms."""

from enum import Enum

from apim_sync.config import SyncConfig
from apim_sync.platforms.apihub import ApiHubPlatform
from apim_sync.platforms.azure import AzurePlatform
from apim_sync.platforms.base import DestinationPlatform, SourcePlatform, join_url


class OfframpSource(str, Enum):
    """Platforms APIs can be offramped from."""

    AZURE = "azure"


class OnrampDestination(str, Enum):
    """Platforms APIs can be onramped to."""

    APIHUB = "apihub"


def get_source_platform(source: OfframpSource | str, config: SyncConfig) -> SourcePlatform:
    """Build the profile for an offramp source."""
    source = OfframpSource(source)
    if source is OfframpSource.AZURE:
        return AzurePlatform(config.azure)
    raise ValueError(f"Unsupported offramp source: {source}")


def get_destination_platform(
    destination: OnrampDestination | str, config: SyncConfig
) -> DestinationPlatform:
    """Build the profile for an onramp destination."""
    destination = OnrampDestination(destination)
    if destination is OnrampDestination.APIHUB:
        return ApiHubPlatform(config.apihub)
    raise ValueError(f"Unsupported onramp destination: {destination}")


__all__ = [
    "ApiHubPlatform",
    "AzurePlatform",
    "DestinationPlatform",
    "OfframpSource",
    "OnrampDestination",
    "SourcePlatform",
    "get_destination_platform",
    "get_source_platform",
    "join_url",
]
