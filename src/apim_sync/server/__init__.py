"""HTTP service exposing sync and status endpoints."""

from apim_sync.server.app import create_app

__all__ = ["create_app"]
