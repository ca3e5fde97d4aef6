"""
Serve command running the sync HTTP service.
"""

import click
import uvicorn

from apim_sync.cli.context import SyncContext
from apim_sync.cli.decorators import handle_errors, pass_context
from apim_sync.cli.utils import echo_info
from apim_sync.server.app import create_app


@click.command(name="serve")
@click.option("--host", default="0.0.0.0", show_default=True, help="Address to bind")
@click.option("--port", type=int, default=8080, show_default=True, envvar="PORT", help="Port to bind")
@pass_context
@handle_errors
def serve(ctx: SyncContext, host: str, port: int) -> None:
    """Run the sync HTTP service.

    Exposes GET /v1/apim/status and POST /v1/apim/sync.
    """
    app = create_app(ctx.config)
    echo_info(f"Serving on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=ctx.log_level.lower())
