"""Staging pipeline: export, offramp, onramp and import."""

from apim_sync.migration.coordinator import SyncCoordinator
from apim_sync.migration.exporter import ApiExporter
from apim_sync.migration.importer import ApiImporter
from apim_sync.migration.naming import group_key, normalize
from apim_sync.migration.offramp import OfframpTransformer
from apim_sync.migration.onramp import OnrampTransformer
from apim_sync.migration.staging import Stager

__all__ = [
    "ApiExporter",
    "ApiImporter",
    "OfframpTransformer",
    "OnrampTransformer",
    "Stager",
    "SyncCoordinator",
    "group_key",
    "normalize",
]
