"""
Sync HTTP service.

Exposes the coordinator over HTTP:

- ``GET /v1/apim/status``: configuration and connectivity of every platform
- ``POST /v1/apim/sync``: run an offramp and/or onramp

Pipeline failures are reported in the response body with ``result: false``;
unknown platform tags are rejected with 422 by request validation.
"""

from fastapi import APIRouter, Depends, FastAPI, Request
from pydantic import BaseModel, Field

from apim_sync import __version__
from apim_sync.config import SyncConfig, config_from_env
from apim_sync.migration.coordinator import SyncCoordinator
from apim_sync.platforms import OfframpSource, OnrampDestination
from apim_sync.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/apim", tags=["APIM"])


class SyncRequest(BaseModel):
    """Platforms to sync from and to."""

    offramp: OfframpSource | None = Field(default=None, description="Source platform")
    onramp: OnrampDestination | None = Field(default=None, description="Destination platform")


class SyncResponse(BaseModel):
    result: bool
    message: str


class PlatformStatusResponse(BaseModel):
    connected: bool
    message: str


def get_coordinator(request: Request) -> SyncCoordinator:
    return request.app.state.coordinator


@router.get("/status", response_model=dict[str, PlatformStatusResponse])
async def get_status(
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> dict[str, PlatformStatusResponse]:
    """Report whether each supported platform is configured and reachable."""
    statuses = await coordinator.status()
    return {
        tag: PlatformStatusResponse(**platform_status.to_dict())
        for tag, platform_status in statuses.items()
    }


@router.post("/sync", response_model=SyncResponse)
async def post_sync(
    body: SyncRequest,
    coordinator: SyncCoordinator = Depends(get_coordinator),
) -> SyncResponse:
    """Offramp from ``body.offramp`` and onramp to ``body.onramp``."""
    logger.info(
        "sync_requested",
        offramp=body.offramp.value if body.offramp else None,
        onramp=body.onramp.value if body.onramp else None,
    )

    result = await coordinator.sync(body.offramp, body.onramp)

    for failure in result.failures:
        logger.warning("sync_api_failed", api=failure.api_name, stage=failure.stage, error=failure.message)

    return SyncResponse(result=result.result, message=result.message)


def create_app(
    config: SyncConfig | None = None,
    coordinator: SyncCoordinator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Sync configuration (defaults to the conventional environment variables)
        coordinator: Coordinator to serve (defaults to one built from ``config``)
    """
    if coordinator is None:
        coordinator = SyncCoordinator(config or config_from_env())

    app = FastAPI(title="APIM Sync", version=__version__)
    app.state.coordinator = coordinator
    app.include_router(router)

    return app
